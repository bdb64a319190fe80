"""
routes/main.py — Homepage and browse pages.

Provides:
- GET / — Homepage with gall-maker families and host families
- GET /family/<id> — Family description and member species
- GET /host/<id> — Host plant with the galls recorded on it
- GET /gall/<id> — Gall species with hosts and physical attributes
- GET /glossary — Glossary of terms
"""

from flask import Blueprint, render_template, redirect, url_for, flash, abort
from database import (
    get_gall_maker_families, get_host_families, get_catalogue_stats,
    get_family, get_species_by_family, get_host, get_gall, get_glossary_entries
)

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Homepage — families of gall makers and of host plants."""
    return render_template(
        'index.html',
        gall_families=get_gall_maker_families(),
        host_families=get_host_families(),
        stats=get_catalogue_stats(),
    )


@main_bp.route('/family/<int:family_id>')
def family_view(family_id):
    """Family page — description and species linked to their gall or host page."""
    family = get_family(family_id)
    if not family:
        flash("Family not found.", "error")
        return redirect(url_for('main.index'))

    return render_template(
        'family.html',
        family=family,
        species=get_species_by_family(family_id),
    )


@main_bp.route('/host/<int:host_id>')
def host_view(host_id):
    """Host page — family, common names, abundance and galls."""
    data = get_host(host_id)
    if not data:
        abort(404)

    return render_template('host.html', **data)


@main_bp.route('/gall/<int:gall_id>')
def gall_view(gall_id):
    """Gall page — family, hosts and the facet values used for identification."""
    gall = get_gall(gall_id)
    if not gall:
        abort(404)

    return render_template('gall.html', gall=gall)


@main_bp.route('/glossary')
def glossary():
    """Glossary of terms used in gall descriptions."""
    return render_template('glossary.html', entries=get_glossary_entries())
