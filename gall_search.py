"""
gall_search.py — Faceted matching for the gall ID page.

This module implements:
- Wildcard detection for query facets (None, empty string, empty list)
- Per-gall matching against a SearchQuery, one rule per facet
- Filtering a candidate list loaded for a host or genus
- Deriving a new query when a single facet changes

Matching rules:
- Single text facets (alignment, cells, color, shape, walls): exact,
  case-sensitive match against the gall's value; an absent value never matches
- Detachable: 'yes' -> flag 1, 'no' -> flag 0, 'unsure' -> flag absent
- List facets (locations, textures): every queried value must be present
  on the gall; extra values on the gall are fine
- A gall matches when every facet rule passes
"""

from dataclasses import replace

from models import SearchQuery


DETACHABLE_YES = 'yes'
DETACHABLE_NO = 'no'
DETACHABLE_UNSURE = 'unsure'
DETACHABLE_OPTIONS = [DETACHABLE_YES, DETACHABLE_NO, DETACHABLE_UNSURE]

SINGLE_FACETS = ['alignment', 'cells', 'color', 'shape', 'walls', 'detachable']
LIST_FACETS = ['locations', 'textures']


def dont_care(value):
    """Return True when a query value places no constraint on the search."""
    return value is None or (isinstance(value, (str, list, tuple)) and len(value) == 0)


def _single(facet):
    """Build a rule comparing the text field of a single-valued facet."""
    def check(props, query):
        wanted = getattr(query, facet)
        if dont_care(wanted):
            return True
        value = getattr(props, facet)
        return value is not None and getattr(value, facet) == wanted
    return check


def _check_detachable(props, query):
    wanted = query.detachable
    if dont_care(wanted):
        return True

    flag = props.detachable
    if wanted == DETACHABLE_UNSURE:
        return flag is None
    if flag is None:
        return False
    if wanted == DETACHABLE_YES:
        return flag == 1
    if wanted == DETACHABLE_NO:
        return flag == 0
    return False


def _many(query_field, record_field, key):
    """Build a rule requiring every queried value among the gall's entries."""
    def check(props, query):
        wanted = getattr(query, query_field)
        if dont_care(wanted):
            return True
        present = {getattr(entry, key) for entry in getattr(props, record_field)}
        return all(w in present for w in wanted)
    return check


# (facet, rule) pairs; a gall must pass all of them.
FACET_RULES = [
    ('alignment', _single('alignment')),
    ('cells', _single('cells')),
    ('color', _single('color')),
    ('shape', _single('shape')),
    ('walls', _single('walls')),
    ('detachable', _check_detachable),
    ('locations', _many('locations', 'galllocation', 'loc')),
    ('textures', _many('textures', 'galltexture', 'tex')),
]


def check_gall(gall, query):
    """
    Check a single gall against a query.

    Args:
        gall: Gall whose .gall holds its GallProperties.
        query: SearchQuery for the current filtering pass.

    Returns:
        True if the gall passes every facet rule.
    """
    return all(rule(gall.gall, query) for _, rule in FACET_RULES)


def filter_galls(galls, query):
    """Return the galls matching the query, in their original order."""
    return [g for g in galls if check_gall(g, query)]


def empty_search_query():
    """A query that matches every gall."""
    return SearchQuery()


def _first(value):
    if isinstance(value, (list, tuple)):
        return value[0] if value else ''
    return value or ''


def update_query(query, field, value):
    """
    Derive a new query with one facet changed.

    Args:
        query: The current SearchQuery (left untouched).
        field: Facet name, 'host', 'locations' or 'textures' included.
        value: A string or a list of strings as sent by the filter widgets.

    Returns:
        A new SearchQuery sharing every other facet with the current one.
    """
    if field == 'host':
        return replace(query, host=_first(value))

    if field in LIST_FACETS:
        values = value if isinstance(value, (list, tuple)) else [value]
        return replace(query, **{field: tuple(v for v in values if v)})

    if field in SINGLE_FACETS:
        s = _first(value)
        return replace(query, **{field: s if len(s) >= 1 else None})

    raise ValueError(f"Unknown search field: {field}")
