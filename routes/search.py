"""
routes/search.py — Gall identification page and search API.

Provides:
- GET /id — ID page: host/genus selection and facet filters
- POST /id — Search form submit, redirects to the GET page for that host or genus;
  an invalid form re-renders the page with the entered values
- GET /api/search — JSON list of galls for ?host= or ?genus=, filtered by facet params
- GET /api/facets — JSON facet vocabularies for the filter widgets

The candidate list is loaded once per host or genus; facet parameters only
narrow that list in memory via gall_search.filter_galls.
"""

import logging

from flask import Blueprint, render_template, request, redirect, url_for, flash, jsonify

from database import (
    get_host_names, get_host_genera, get_all_facet_values,
    get_galls_by_host_name, get_galls_by_host_genus
)
from gall_search import filter_galls, empty_search_query, DETACHABLE_OPTIONS
from utils.validators import extract_query_param, validate_search_form, parse_search_query

logger = logging.getLogger(__name__)

search_bp = Blueprint('search', __name__)


def _load_candidates(host, genus):
    """Candidate galls for a host species or a host genus."""
    if host:
        return get_galls_by_host_name(host)
    return get_galls_by_host_genus(genus)


@search_bp.route('/id', methods=['GET', 'POST'])
def id_page():
    """ID page — pick a host or genus, then narrow the galls by facets."""
    if request.method == 'POST':
        host = request.form.get('host', '').strip()
        genus = request.form.get('genus', '').strip()
        error = validate_search_form(host, genus)
        if error:
            # Keep what was typed so it can be corrected
            flash(error, 'error')
            return _render_id_page(host, genus, empty_search_query())
        # A new host/genus search starts with every facet cleared
        if host:
            return redirect(url_for('search.id_page', host=host))
        return redirect(url_for('search.id_page', genus=genus))

    host = extract_query_param(request.args, 'host')
    genus = None if host else extract_query_param(request.args, 'genus')
    query = parse_search_query(request.args)

    galls = []
    filtered = []
    if host or genus:
        galls = _load_candidates(host, genus)
        filtered = filter_galls(galls, query)
        logger.debug("ID search %s: %d candidates, %d matches", query.host, len(galls), len(filtered))

    return _render_id_page(host, genus, query, searched=bool(host or genus), total=len(galls), galls=filtered)


def _render_id_page(host, genus, query, searched=False, total=0, galls=()):
    return render_template(
        'id.html',
        hosts=get_host_names(),
        genera=get_host_genera(),
        facets=get_all_facet_values(),
        detachable_options=DETACHABLE_OPTIONS,
        host=host or '',
        genus=genus or '',
        query=query,
        searched=searched,
        total=total,
        galls=list(galls),
    )


@search_bp.route('/api/search')
def api_search():
    """JSON API — galls for a host or genus, narrowed by any facet params."""
    host = extract_query_param(request.args, 'host')
    genus = extract_query_param(request.args, 'genus')

    if not host and not genus:
        return jsonify({
            'success': False,
            'error': 'No valid query provided. You must provide a host or genus value.'
        }), 400

    try:
        galls = _load_candidates(host, None if host else genus)
        filtered = filter_galls(galls, parse_search_query(request.args))
        return jsonify({
            'success': True,
            'total': len(galls),
            'galls': [g.to_dict() for g in filtered],
        })
    except Exception as e:
        logger.exception("Search failed for host=%s genus=%s", host, genus)
        return jsonify({'success': False, 'error': str(e)}), 500


@search_bp.route('/api/facets')
def api_facets():
    """JSON API — facet vocabularies used to populate the filter widgets."""
    try:
        facets = get_all_facet_values()
        facets['detachable'] = DETACHABLE_OPTIONS
        return jsonify({'success': True, 'facets': facets})
    except Exception as e:
        logger.exception("Could not load facet values")
        return jsonify({'success': False, 'error': str(e)}), 500
