"""
utils/validators.py — Request parameter helpers for the search pages.

Validates:
- Search form: exactly one of host or genus
- Facet filters: query string parameters turned into a SearchQuery
"""

from typing import Optional

from gall_search import empty_search_query, update_query, SINGLE_FACETS, LIST_FACETS


def extract_query_param(args, prop: str) -> Optional[str]:
    """
    Extract a single query parameter.

    Returns:
        The first non-blank value for prop, unmodified, or None when missing
        or blank. Facet values are compared exactly, so whitespace is kept.
    """
    values = args.getlist(prop) if hasattr(args, 'getlist') else [args.get(prop)]
    for v in values:
        if v and v.strip():
            return v
    return None


def validate_search_form(host: Optional[str], genus: Optional[str]) -> Optional[str]:
    """Return an error message unless exactly one of host or genus is given."""
    host = (host or '').strip()
    genus = (genus or '').strip()
    if not host and not genus:
        return "You must provide a search selection, either a Host species or genus."
    if host and genus:
        return "Search by either a Host species or a genus, not both."
    return None


def parse_search_query(args):
    """
    Build a SearchQuery from request arguments.

    List facets accept repeated parameters (?locations=a&locations=b);
    single facets take their first non-blank value.
    """
    query = empty_search_query()

    host = extract_query_param(args, 'host') or extract_query_param(args, 'genus')
    if host:
        query = update_query(query, 'host', host)

    for field in SINGLE_FACETS:
        value = extract_query_param(args, field)
        if value:
            query = update_query(query, field, value)

    for field in LIST_FACETS:
        values = [v for v in args.getlist(field) if v and v.strip()]
        if values:
            query = update_query(query, field, values)

    return query
