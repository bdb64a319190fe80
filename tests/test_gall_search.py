"""
tests/test_gall_search.py — Tests for the gall matching engine.

Tests cover:
- Wildcard detection
- Single facet exact matching
- Detachable tri-state handling
- Location/texture subset matching
- Query derivation and list filtering
"""

from dataclasses import replace

import pytest

from gall_search import (
    dont_care,
    check_gall,
    filter_galls,
    empty_search_query,
    update_query,
    FACET_RULES,
)
from models import (
    Gall, GallProperties, Family, SearchQuery,
    Alignment, Cells, Color, Shape, Walls, GallLocation, GallTexture,
)


def make_gall(**props):
    """A gall whose physical attributes are all absent unless given."""
    return Gall(
        id=1,
        name='Gallus gallus',
        genus='Gallus',
        family=Family(1, 'Phasianidae', ''),
        description='The chicken gall...',
        gall=GallProperties(**props),
    )


def locs(*names):
    return [GallLocation(i, n, '') for i, n in enumerate(names, 1)]


def texs(*names):
    return [GallTexture(i, n, '') for i, n in enumerate(names, 1)]


FULL_PROPS = dict(
    alignment=Alignment(1, 'afoo'),
    cells=Cells(1, 'cefoo'),
    color=Color(1, 'cofoo'),
    shape=Shape(1, 'sfoo'),
    walls=Walls(1, 'wfoo'),
    detachable=1,
    galllocation=locs('lfoo'),
    galltexture=texs('tfoo'),
)

FULL_QUERY = SearchQuery(
    alignment='afoo', cells='cefoo', color='cofoo', shape='sfoo', walls='wfoo',
    detachable='yes', locations=('lfoo',), textures=('tfoo',),
)


# ========================================
# Wildcards
# ========================================

class TestDontCare:

    @pytest.mark.parametrize('value', [None, '', [], ()])
    def test_wildcards(self, value):
        assert dont_care(value)

    @pytest.mark.parametrize('value', ['foo', ' ', ['foo'], ('a', 'b'), 0])
    def test_constraints(self, value):
        assert not dont_care(value)


# ========================================
# check_gall
# ========================================

class TestCheckGall:

    def test_empty_query_matches_empty_gall(self):
        assert check_gall(make_gall(), empty_search_query())

    @pytest.mark.parametrize('props', [
        {'alignment': Alignment(1, '')},
        {'cells': Cells(1, '')},
        {'color': Color(1, '')},
        {'shape': Shape(1, '')},
        {'walls': Walls(1, '')},
        {'galllocation': locs('')},
        {'galltexture': texs('')},
        {'detachable': 0},
        {'detachable': 1},
        FULL_PROPS,
    ])
    def test_empty_query_matches_anything(self, props):
        assert check_gall(make_gall(**props), empty_search_query())

    def test_blank_strings_are_wildcards(self):
        q = SearchQuery(alignment='', cells='', color='', shape='', walls='', detachable='')
        assert check_gall(make_gall(), q)

    @pytest.mark.parametrize('facet, value', [
        ('alignment', Alignment(1, 'foo')),
        ('cells', Cells(1, 'foo')),
        ('color', Color(1, 'foo')),
        ('shape', Shape(1, 'foo')),
        ('walls', Walls(1, 'foo')),
    ])
    def test_single_facet_match(self, facet, value):
        q = replace(empty_search_query(), **{facet: 'foo'})
        assert check_gall(make_gall(**{facet: value}), q)

    @pytest.mark.parametrize('facet, value', [
        ('alignment', Alignment(1, 'foo')),
        ('cells', Cells(1, 'foo')),
        ('color', Color(1, 'foo')),
        ('shape', Shape(1, 'foo')),
        ('walls', Walls(1, 'foo')),
    ])
    def test_single_facet_exact_only(self, facet, value):
        for wanted in ['Foo', 'foo ', 'fo', 'bar']:
            q = replace(empty_search_query(), **{facet: wanted})
            assert not check_gall(make_gall(**{facet: value}), q)

    @pytest.mark.parametrize('facet', ['alignment', 'cells', 'color', 'shape', 'walls'])
    def test_single_facet_absent_on_gall(self, facet):
        q = replace(empty_search_query(), **{facet: 'foo'})
        assert not check_gall(make_gall(), q)

    def test_multiple_facets_match(self):
        assert check_gall(make_gall(**FULL_PROPS), FULL_QUERY)

    def test_conjunction(self):
        """A single failing facet fails the whole gall."""
        g = make_gall(**FULL_PROPS)
        for facet in ['alignment', 'cells', 'color', 'shape', 'walls']:
            assert not check_gall(g, replace(FULL_QUERY, **{facet: 'nope'}))
        assert not check_gall(g, replace(FULL_QUERY, detachable='no'))
        assert not check_gall(g, replace(FULL_QUERY, locations=('nope',)))
        assert not check_gall(g, replace(FULL_QUERY, textures=('nope',)))

    def test_relaxing_a_facet_never_excludes(self):
        g = make_gall(color=Color(1, 'red'), galllocation=locs('stem'))
        q = SearchQuery(color='green', locations=('stem',), detachable='yes')
        assert not check_gall(g, q)

        wildcards = {'alignment': None, 'cells': None, 'color': None, 'shape': None,
                     'walls': None, 'detachable': None, 'locations': (), 'textures': ()}
        for facet, wildcard in wildcards.items():
            before = check_gall(g, q)
            after = check_gall(g, replace(q, **{facet: wildcard}))
            assert after or not before
            q = replace(q, **{facet: wildcard})

        assert check_gall(g, q)

    def test_does_not_mutate_inputs(self):
        g = make_gall(**FULL_PROPS)
        before = g.to_dict()
        check_gall(g, FULL_QUERY)
        assert g.to_dict() == before

    def test_rule_table_covers_every_facet(self):
        assert [name for name, _ in FACET_RULES] == [
            'alignment', 'cells', 'color', 'shape', 'walls', 'detachable', 'locations', 'textures'
        ]


# ========================================
# Detachable
# ========================================

class TestDetachable:

    @pytest.mark.parametrize('flag, wanted, expected', [
        (1, 'yes', True),
        (1, 'no', False),
        (1, 'unsure', False),
        (1, None, True),
        (0, 'yes', False),
        (0, 'no', True),
        (0, 'unsure', False),
        (0, None, True),
        (None, 'yes', False),
        (None, 'no', False),
        (None, 'unsure', True),
        (None, None, True),
    ])
    def test_tri_state(self, flag, wanted, expected):
        q = SearchQuery(detachable=wanted)
        assert check_gall(make_gall(detachable=flag), q) is expected

    @pytest.mark.parametrize('flag', [0, 1, None])
    def test_unknown_query_value_never_matches(self, flag):
        assert not check_gall(make_gall(detachable=flag), SearchQuery(detachable='maybe'))

    def test_unsure_ignores_other_numbers(self):
        assert not check_gall(make_gall(detachable=2), SearchQuery(detachable='unsure'))


# ========================================
# Locations and textures
# ========================================

class TestListFacets:

    @pytest.fixture
    def gall(self):
        return make_gall(galllocation=locs('lfoo1', 'lfoo2'), galltexture=texs('tfoo'))

    def test_missing_location(self, gall):
        assert not check_gall(gall, SearchQuery(locations=('lfoo',), textures=('tfoo',)))

    def test_one_of_many(self, gall):
        assert check_gall(gall, SearchQuery(locations=('lfoo1',), textures=('tfoo',)))

    def test_all_present(self, gall):
        assert check_gall(gall, SearchQuery(locations=('lfoo1', 'lfoo2'), textures=('tfoo',)))

    def test_extra_query_value(self, gall):
        assert not check_gall(gall, SearchQuery(locations=('lfoo1', 'lfoo2', 'nope'), textures=('tfoo',)))

    def test_empty_lists(self, gall):
        assert check_gall(gall, SearchQuery(locations=(), textures=()))

    def test_empty_gall_list(self):
        assert not check_gall(make_gall(), SearchQuery(locations=('stem',)))
        assert not check_gall(make_gall(), SearchQuery(textures=('hairy',)))

    @pytest.mark.parametrize('wanted, present, expected', [
        ((), (), True),
        ((), ('a',), True),
        (('a',), (), False),
        (('a',), ('a',), True),
        (('a', 'b'), ('b', 'a', 'c'), True),
        (('a', 'd'), ('a', 'b', 'c'), False),
        (('a', 'a'), ('a',), True),
    ])
    def test_subset_law(self, wanted, present, expected):
        g = make_gall(galltexture=texs(*present))
        assert check_gall(g, SearchQuery(textures=wanted)) is expected


# ========================================
# filter_galls and update_query
# ========================================

class TestFilterGalls:

    def test_preserves_order(self):
        galls = [
            replace(make_gall(color=Color(1, 'red')), id=1),
            replace(make_gall(color=Color(2, 'green')), id=2),
            replace(make_gall(color=Color(1, 'red')), id=3),
        ]
        assert [g.id for g in filter_galls(galls, SearchQuery(color='red'))] == [1, 3]
        assert [g.id for g in filter_galls(galls, empty_search_query())] == [1, 2, 3]

    def test_empty_candidates(self):
        assert filter_galls([], FULL_QUERY) == []


class TestUpdateQuery:

    def test_returns_new_query(self):
        q = empty_search_query()
        qq = update_query(q, 'color', 'red')
        assert qq.color == 'red'
        assert q.color is None

    def test_preserves_other_facets(self):
        q = update_query(empty_search_query(), 'locations', ['stem', 'bud'])
        q = update_query(q, 'shape', ['globular'])
        q = update_query(q, 'detachable', 'yes')
        assert q.locations == ('stem', 'bud')
        assert q.shape == 'globular'
        assert q.detachable == 'yes'

    def test_single_value_list_field(self):
        assert update_query(empty_search_query(), 'textures', 'hairy').textures == ('hairy',)

    def test_clearing(self):
        q = SearchQuery(color='red', locations=('stem',))
        assert update_query(q, 'color', []).color is None
        assert update_query(q, 'color', '').color is None
        assert update_query(q, 'locations', []).locations == ()

    def test_host(self):
        assert update_query(empty_search_query(), 'host', ['Quercus alba', 'x']).host == 'Quercus alba'
        assert update_query(empty_search_query(), 'host', 'Quercus').host == 'Quercus'

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            update_query(empty_search_query(), 'size', 'big')
