"""
database.py — SQLite schema creation, seed data, and catalogue queries.

Holds families, species (gall makers and host plants), the facet
vocabularies used by the ID page, gall attributes, gall/host links and the
glossary. Uses WAL mode for concurrent read performance.
"""

import logging
import os
import sqlite3
from typing import Optional, List, Dict, Any, Tuple

from flask import current_app, has_app_context

from models import (
    GALL_TAXON, HOST_TAXON,
    Family, Species, Gall, GallProperties, GlossaryEntry,
    Alignment, Cells, Color, Shape, Walls, GallLocation, GallTexture,
)

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'gall_catalogue.db')

# Facet vocabulary tables: table -> text column
FACET_TABLES = {
    'alignment': 'alignment',
    'cells': 'cells',
    'color': 'color',
    'shape': 'shape',
    'walls': 'walls',
    'location': 'loc',
    'texture': 'tex',
}


def get_db_path() -> str:
    """Database path: app config DATABASE, then GALL_DB_PATH, then the default."""
    if has_app_context() and current_app.config.get('DATABASE'):
        return current_app.config['DATABASE']
    return os.environ.get('GALL_DB_PATH', DEFAULT_DB_PATH)


def get_db() -> sqlite3.Connection:
    """Get a database connection with WAL mode and foreign keys enabled."""
    db_path = get_db_path()
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Create all tables and indexes if they don't exist."""
    conn = get_db()
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS family (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT UNIQUE NOT NULL,
            description TEXT NOT NULL DEFAULT ''
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS abundance (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            abundance TEXT UNIQUE NOT NULL,
            description TEXT
        )
    """)

    # Table: species
    # - taxoncode: 'gall' for gall makers, 'plant' for hosts
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS species (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            taxoncode TEXT NOT NULL CHECK (taxoncode IN ('gall', 'plant')),
            name TEXT UNIQUE NOT NULL,
            genus TEXT NOT NULL,
            family_id INTEGER NOT NULL REFERENCES family(id) ON DELETE CASCADE,
            description TEXT,
            commonnames TEXT,
            synonyms TEXT,
            abundance_id INTEGER REFERENCES abundance(id)
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_species_family ON species(family_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_species_genus ON species(genus)")

    # Facet vocabularies (color has no description column)
    for table, column in FACET_TABLES.items():
        description = "" if table == 'color' else ", description TEXT"
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                {column} TEXT UNIQUE NOT NULL{description}
            )
        """)

    # Table: gall
    # - detachable: 1 = yes, 0 = no, NULL = not recorded
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS gall (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            species_id INTEGER UNIQUE NOT NULL REFERENCES species(id) ON DELETE CASCADE,
            detachable INTEGER CHECK (detachable IN (0, 1)),
            alignment_id INTEGER REFERENCES alignment(id),
            cells_id INTEGER REFERENCES cells(id),
            color_id INTEGER REFERENCES color(id),
            shape_id INTEGER REFERENCES shape(id),
            walls_id INTEGER REFERENCES walls(id)
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS galllocation (
            gall_id INTEGER NOT NULL REFERENCES gall(id) ON DELETE CASCADE,
            location_id INTEGER NOT NULL REFERENCES location(id),
            PRIMARY KEY (gall_id, location_id)
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS galltexture (
            gall_id INTEGER NOT NULL REFERENCES gall(id) ON DELETE CASCADE,
            texture_id INTEGER NOT NULL REFERENCES texture(id),
            PRIMARY KEY (gall_id, texture_id)
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS host (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            gall_species_id INTEGER NOT NULL REFERENCES species(id) ON DELETE CASCADE,
            host_species_id INTEGER NOT NULL REFERENCES species(id) ON DELETE CASCADE,
            UNIQUE(gall_species_id, host_species_id)
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_host_host ON host(host_species_id)")

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS glossary (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            word TEXT UNIQUE NOT NULL,
            definition TEXT NOT NULL,
            urls TEXT NOT NULL DEFAULT ''
        )
    """)

    conn.commit()
    conn.close()


DEFAULT_VOCABULARY = {
    'abundance': ['abundant', 'common', 'frequent', 'occasional', 'rare'],
    'alignment': ['drooping', 'erect', 'integral', 'leaning', 'supine'],
    'cells': ['free-rolling', 'monothalamous', 'polythalamous', 'scattered'],
    'color': ['black', 'brown', 'green', 'orange', 'pink', 'purple', 'red', 'tan', 'white', 'yellow'],
    'shape': ['cluster', 'conical', 'cup', 'cylindrical', 'disc', 'globular', 'irregular',
              'numerous', 'rosette', 'spangle', 'spindle', 'tuft'],
    'walls': ['broken', 'false chamber', 'radiating fibers', 'spongy', 'thick', 'thin'],
    'location': ['bud', 'flower', 'fruit', 'leaf edge', 'lower leaf', 'midrib', 'petiole',
                 'root', 'stem', 'twig', 'upper leaf', 'between veins', 'on leaf veins'],
    'texture': ['bumpy', 'hairless', 'hairy', 'honeydew', 'mottled', 'spiky/thorny',
                'stiff', 'succulent', 'woolly'],
}


def seed_defaults():
    """Populate the facet vocabularies if empty. Idempotent — skips if data exists."""
    conn = get_db()
    cursor = conn.cursor()

    columns = dict(FACET_TABLES, abundance='abundance')
    for table, values in DEFAULT_VOCABULARY.items():
        existing = cursor.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        if existing == 0:
            cursor.executemany(
                f"INSERT INTO {table} ({columns[table]}) VALUES (?)",
                [(v,) for v in values]
            )

    conn.commit()
    conn.close()


# ========================================
# Families
# ========================================

def _to_family(row) -> Family:
    return Family(id=row['id'], name=row['name'], description=row['description'])


def get_families(descriptions: Optional[List[str]] = None) -> List[Family]:
    """All families, optionally restricted to the given descriptions (e.g. 'Plant')."""
    conn = get_db()
    try:
        if descriptions:
            placeholders = ', '.join('?' for _ in descriptions)
            rows = conn.execute(
                f"SELECT * FROM family WHERE description IN ({placeholders}) ORDER BY name",
                descriptions
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM family ORDER BY name").fetchall()
        return [_to_family(r) for r in rows]
    finally:
        conn.close()


def get_family(family_id: int) -> Optional[Family]:
    """Retrieve a single family by ID."""
    conn = get_db()
    try:
        row = conn.execute("SELECT * FROM family WHERE id = ?", (family_id,)).fetchone()
        return _to_family(row) if row else None
    finally:
        conn.close()


def _families_with_species(conn, taxoncode: str, plant_families: bool) -> List[Dict[str, Any]]:
    comparison = '=' if plant_families else '!='
    families = conn.execute(
        f"SELECT * FROM family WHERE description {comparison} 'Plant' ORDER BY name"
    ).fetchall()

    result = []
    for f in families:
        species = conn.execute(
            "SELECT id, name FROM species WHERE family_id = ? AND taxoncode = ? ORDER BY name",
            (f['id'], taxoncode)
        ).fetchall()
        result.append({'family': _to_family(f), 'species': [dict(s) for s in species]})
    return result


def get_gall_maker_families() -> List[Dict[str, Any]]:
    """Families of gall makers, each with its gall species."""
    conn = get_db()
    try:
        return _families_with_species(conn, GALL_TAXON, plant_families=False)
    finally:
        conn.close()


def get_host_families() -> List[Dict[str, Any]]:
    """Plant families, each with its host species."""
    conn = get_db()
    try:
        return _families_with_species(conn, HOST_TAXON, plant_families=True)
    finally:
        conn.close()


# ========================================
# Species
# ========================================

SPECIES_SELECT = """
    SELECT s.*, a.abundance AS abundance
    FROM species s
    LEFT JOIN abundance a ON s.abundance_id = a.id
"""


def _to_species(row) -> Species:
    return Species(
        id=row['id'],
        taxoncode=row['taxoncode'],
        name=row['name'],
        genus=row['genus'],
        family_id=row['family_id'],
        description=row['description'],
        commonnames=row['commonnames'],
        synonyms=row['synonyms'],
        abundance=row['abundance'],
    )


def get_species_by_family(family_id: int) -> List[Species]:
    """All species of a family, ordered by name."""
    conn = get_db()
    try:
        rows = conn.execute(
            SPECIES_SELECT + " WHERE s.family_id = ? ORDER BY s.name", (family_id,)
        ).fetchall()
        return [_to_species(r) for r in rows]
    finally:
        conn.close()


def get_host(host_id: int) -> Optional[Dict[str, Any]]:
    """
    Get a host plant with its family and the galls found on it.

    Returns:
        Dict with 'host', 'family' and 'galls' or None if not found
    """
    conn = get_db()
    try:
        row = conn.execute(
            SPECIES_SELECT + " WHERE s.id = ? AND s.taxoncode = ?", (host_id, HOST_TAXON)
        ).fetchone()
        if not row:
            return None

        family = conn.execute("SELECT * FROM family WHERE id = ?", (row['family_id'],)).fetchone()
        galls = conn.execute("""
            SELECT s.id, s.name FROM host h
            JOIN species s ON h.gall_species_id = s.id
            WHERE h.host_species_id = ?
            ORDER BY s.name
        """, (host_id,)).fetchall()

        return {
            'host': _to_species(row),
            'family': _to_family(family),
            'galls': [dict(g) for g in galls],
        }
    finally:
        conn.close()


def get_hosts_by_gall(gall_species_id: int) -> List[Species]:
    """Host plants recorded for a gall species."""
    conn = get_db()
    try:
        return _hosts_by_gall(conn, gall_species_id)
    finally:
        conn.close()


def _hosts_by_gall(conn, gall_species_id: int) -> List[Species]:
    rows = conn.execute(
        SPECIES_SELECT + """
        JOIN host h ON h.host_species_id = s.id
        WHERE h.gall_species_id = ?
        ORDER BY s.name
        """, (gall_species_id,)
    ).fetchall()
    return [_to_species(r) for r in rows]


def get_host_names() -> List[str]:
    """Names of every host plant, for the ID page host selector."""
    conn = get_db()
    try:
        rows = conn.execute(
            "SELECT name FROM species WHERE taxoncode = ? ORDER BY name", (HOST_TAXON,)
        ).fetchall()
        return [r['name'] for r in rows]
    finally:
        conn.close()


def get_host_genera() -> List[str]:
    """Distinct host genera, for the ID page genus selector."""
    conn = get_db()
    try:
        rows = conn.execute(
            "SELECT DISTINCT genus FROM species WHERE taxoncode = ? ORDER BY genus", (HOST_TAXON,)
        ).fetchall()
        return [r['genus'] for r in rows]
    finally:
        conn.close()


# ========================================
# Galls
# ========================================

GALL_SELECT = """
    SELECT s.*, ab.abundance AS abundance,
           f.name AS family_name, f.description AS family_description,
           g.id AS gall_id, g.detachable,
           g.alignment_id, al.alignment, al.description AS alignment_description,
           g.cells_id, ce.cells, ce.description AS cells_description,
           g.color_id, co.color,
           g.shape_id, sh.shape, sh.description AS shape_description,
           g.walls_id, wa.walls, wa.description AS walls_description
    FROM species s
    JOIN gall g ON g.species_id = s.id
    JOIN family f ON s.family_id = f.id
    LEFT JOIN abundance ab ON s.abundance_id = ab.id
    LEFT JOIN alignment al ON g.alignment_id = al.id
    LEFT JOIN cells ce ON g.cells_id = ce.id
    LEFT JOIN color co ON g.color_id = co.id
    LEFT JOIN shape sh ON g.shape_id = sh.id
    LEFT JOIN walls wa ON g.walls_id = wa.id
"""


def _build_gall(conn, row) -> Gall:
    """Assemble a Gall from a GALL_SELECT row plus its locations, textures and hosts."""
    locations = conn.execute("""
        SELECT l.* FROM galllocation gl JOIN location l ON gl.location_id = l.id
        WHERE gl.gall_id = ? ORDER BY l.loc
    """, (row['gall_id'],)).fetchall()
    textures = conn.execute("""
        SELECT t.* FROM galltexture gt JOIN texture t ON gt.texture_id = t.id
        WHERE gt.gall_id = ? ORDER BY t.tex
    """, (row['gall_id'],)).fetchall()

    props = GallProperties(
        alignment=Alignment(row['alignment_id'], row['alignment'], row['alignment_description'])
        if row['alignment_id'] is not None else None,
        cells=Cells(row['cells_id'], row['cells'], row['cells_description'])
        if row['cells_id'] is not None else None,
        color=Color(row['color_id'], row['color']) if row['color_id'] is not None else None,
        shape=Shape(row['shape_id'], row['shape'], row['shape_description'])
        if row['shape_id'] is not None else None,
        walls=Walls(row['walls_id'], row['walls'], row['walls_description'])
        if row['walls_id'] is not None else None,
        detachable=row['detachable'],
        galllocation=[GallLocation(l['id'], l['loc'], l['description']) for l in locations],
        galltexture=[GallTexture(t['id'], t['tex'], t['description']) for t in textures],
    )

    return Gall(
        id=row['id'],
        name=row['name'],
        genus=row['genus'],
        family=Family(row['family_id'], row['family_name'], row['family_description']),
        description=row['description'],
        commonnames=row['commonnames'],
        synonyms=row['synonyms'],
        abundance=row['abundance'],
        gall=props,
        hosts=_hosts_by_gall(conn, row['id']),
    )


def get_gall(species_id: int) -> Optional[Gall]:
    """Retrieve a gall species with all its attributes, or None if not found."""
    conn = get_db()
    try:
        row = conn.execute(GALL_SELECT + " WHERE s.id = ?", (species_id,)).fetchone()
        return _build_gall(conn, row) if row else None
    finally:
        conn.close()


def get_galls_by_host_name(host_name: str) -> List[Gall]:
    """Every gall recorded on the named host plant."""
    conn = get_db()
    try:
        rows = conn.execute(GALL_SELECT + """
            WHERE s.id IN (
                SELECT h.gall_species_id FROM host h
                JOIN species hs ON h.host_species_id = hs.id
                WHERE hs.name = ?
            )
            ORDER BY s.name
        """, (host_name,)).fetchall()
        return [_build_gall(conn, r) for r in rows]
    finally:
        conn.close()


def get_galls_by_host_genus(genus: str) -> List[Gall]:
    """Every gall recorded on any host plant of the genus."""
    conn = get_db()
    try:
        rows = conn.execute(GALL_SELECT + """
            WHERE s.id IN (
                SELECT h.gall_species_id FROM host h
                JOIN species hs ON h.host_species_id = hs.id
                WHERE hs.genus = ? AND hs.taxoncode = ?
            )
            ORDER BY s.name
        """, (genus, HOST_TAXON)).fetchall()
        return [_build_gall(conn, r) for r in rows]
    finally:
        conn.close()


# ========================================
# Facet vocabularies
# ========================================

def get_facet_values(table: str) -> List[str]:
    """Distinct values of one facet vocabulary, sorted."""
    column = FACET_TABLES[table]
    conn = get_db()
    try:
        rows = conn.execute(f"SELECT {column} FROM {table} ORDER BY {column}").fetchall()
        return [r[column] for r in rows]
    finally:
        conn.close()


def get_all_facet_values() -> Dict[str, List[str]]:
    """Every facet vocabulary keyed by the search field it populates."""
    return {
        'alignment': get_facet_values('alignment'),
        'cells': get_facet_values('cells'),
        'color': get_facet_values('color'),
        'shape': get_facet_values('shape'),
        'walls': get_facet_values('walls'),
        'locations': get_facet_values('location'),
        'textures': get_facet_values('texture'),
    }


# ========================================
# Glossary
# ========================================

def get_glossary_entries() -> List[GlossaryEntry]:
    """All glossary entries ordered case-insensitively by word."""
    conn = get_db()
    try:
        rows = conn.execute("SELECT * FROM glossary ORDER BY word COLLATE NOCASE ASC").fetchall()
        return [GlossaryEntry(r['id'], r['word'], r['definition'], r['urls']) for r in rows]
    finally:
        conn.close()


# ========================================
# JSON import
# ========================================

def _lookup_id(cursor, table: str, value: Optional[str]) -> Optional[int]:
    """ID of a vocabulary value, inserting it if missing. None/'' gives None."""
    if not value:
        return None
    column = 'abundance' if table == 'abundance' else FACET_TABLES[table]
    row = cursor.execute(f"SELECT id FROM {table} WHERE {column} = ?", (value,)).fetchone()
    if row:
        return row['id']
    cursor.execute(f"INSERT INTO {table} ({column}) VALUES (?)", (value,))
    return cursor.lastrowid


def _detachable_flag(value) -> Optional[int]:
    if value is None or value == '':
        return None
    if isinstance(value, str):
        value = value.strip().lower()
        if value in ('yes', 'true', '1'):
            return 1
        if value in ('no', 'false', '0'):
            return 0
        return None
    if isinstance(value, (bool, int)):
        return 1 if value else 0
    return None


def _as_list(value) -> Optional[list]:
    """A JSON list field: None/missing gives [], anything but a list gives None."""
    if value is None:
        return []
    return value if isinstance(value, list) else None


def _text_or_none(value) -> Tuple[Optional[str], bool]:
    """A single vocabulary value and whether it was well formed."""
    if value is None or isinstance(value, str):
        return value, True
    return None, False


def _save_gall_properties(cursor, species_id: int, gall_data: Dict[str, Any]) -> int:
    """
    Replace the gall row of a species.

    Returns:
        Number of malformed values that were skipped
    """
    errors = 0
    facets = {}
    for facet in ('alignment', 'cells', 'color', 'shape', 'walls'):
        value, ok = _text_or_none(gall_data.get(facet))
        if not ok:
            errors += 1
        facets[facet] = _lookup_id(cursor, facet, value)

    cursor.execute("DELETE FROM gall WHERE species_id = ?", (species_id,))
    cursor.execute("""
        INSERT INTO gall (species_id, detachable, alignment_id, cells_id, color_id, shape_id, walls_id)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    """, (
        species_id,
        _detachable_flag(gall_data.get('detachable')),
        facets['alignment'],
        facets['cells'],
        facets['color'],
        facets['shape'],
        facets['walls'],
    ))
    gall_id = cursor.lastrowid

    for field, table, link in (('locations', 'location', 'galllocation'),
                               ('textures', 'texture', 'galltexture')):
        values = _as_list(gall_data.get(field))
        if values is None:
            logger.warning("Species %s: '%s' must be a list", species_id, field)
            errors += 1
            continue
        for value in values:
            if not isinstance(value, str):
                errors += 1
                continue
            value_id = _lookup_id(cursor, table, value)
            if value_id:
                cursor.execute(
                    f"INSERT OR IGNORE INTO {link} (gall_id, {table}_id) VALUES (?, ?)",
                    (gall_id, value_id)
                )

    return errors


def import_catalogue_json(data: Dict[str, Any]) -> Tuple[bool, str, Dict[str, int]]:
    """
    Import families, species, galls and glossary entries from JSON data.

    Existing rows (matched by name/word) are updated; gall hosts are
    replaced by the imported list. Hosts must be listed before the galls
    that reference them, or already exist.

    Args:
        data: JSON data with optional 'families', 'species' and 'glossary' keys

    Returns:
        Tuple of (success, message, stats)
        stats contains: families, species, glossary, errors
    """
    if not isinstance(data, dict):
        return False, "Invalid JSON: expected an object.", {}

    stats = {'families': 0, 'species': 0, 'glossary': 0, 'errors': 0}

    conn = get_db()
    cursor = conn.cursor()

    try:
        sections = {key: _as_list(data.get(key)) for key in ('families', 'species', 'glossary')}
        for key, items in sections.items():
            if items is None:
                logger.warning("Import: '%s' must be a list", key)
                stats['errors'] += 1
                sections[key] = []

        for fam in sections['families']:
            name = fam.get('name') if isinstance(fam, dict) else None
            name = name.strip() if isinstance(name, str) else ''
            if not name:
                stats['errors'] += 1
                continue
            description, ok = _text_or_none(fam.get('description'))
            if not ok:
                stats['errors'] += 1
            cursor.execute("""
                INSERT INTO family (name, description) VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET description = excluded.description
            """, (name, description or ''))
            stats['families'] += 1

        for sp in sections['species']:
            if not isinstance(sp, dict) or not isinstance(sp.get('name'), str) or not sp['name'].strip():
                stats['errors'] += 1
                continue

            name = sp['name'].strip()
            taxoncode = sp.get('taxoncode', GALL_TAXON)
            family_name = sp.get('family')
            family = cursor.execute(
                "SELECT id FROM family WHERE name = ?", (family_name,)
            ).fetchone() if isinstance(family_name, str) else None
            if not family or taxoncode not in (GALL_TAXON, HOST_TAXON):
                logger.warning("Skipping species %s: unknown family or taxon code", name)
                stats['errors'] += 1
                continue

            text = {}
            for field in ('genus', 'description', 'commonnames', 'synonyms', 'abundance'):
                value, ok = _text_or_none(sp.get(field))
                if not ok:
                    logger.warning("Species %s: '%s' must be text", name, field)
                    stats['errors'] += 1
                text[field] = value

            genus = text['genus'] or name.split(' ')[0]
            cursor.execute("""
                INSERT INTO species (taxoncode, name, genus, family_id, description,
                                     commonnames, synonyms, abundance_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    taxoncode = excluded.taxoncode,
                    genus = excluded.genus,
                    family_id = excluded.family_id,
                    description = excluded.description,
                    commonnames = excluded.commonnames,
                    synonyms = excluded.synonyms,
                    abundance_id = excluded.abundance_id
            """, (taxoncode, name, genus, family['id'], text['description'],
                  text['commonnames'], text['synonyms'],
                  _lookup_id(cursor, 'abundance', text['abundance'])))
            species_id = cursor.execute(
                "SELECT id FROM species WHERE name = ?", (name,)
            ).fetchone()['id']
            stats['species'] += 1

            if taxoncode != GALL_TAXON:
                continue

            gall_data = sp.get('gall')
            if gall_data is None:
                gall_data = {}
            if not isinstance(gall_data, dict):
                logger.warning("Gall %s: 'gall' must be an object", name)
                stats['errors'] += 1
                gall_data = {}
            stats['errors'] += _save_gall_properties(cursor, species_id, gall_data)

            cursor.execute("DELETE FROM host WHERE gall_species_id = ?", (species_id,))
            hosts = _as_list(sp.get('hosts'))
            if hosts is None:
                logger.warning("Gall %s: 'hosts' must be a list", name)
                stats['errors'] += 1
                hosts = []
            for host_name in hosts:
                if not isinstance(host_name, str):
                    stats['errors'] += 1
                    continue
                host = cursor.execute(
                    "SELECT id FROM species WHERE name = ? AND taxoncode = ?", (host_name, HOST_TAXON)
                ).fetchone()
                if not host:
                    logger.warning("Gall %s references unknown host %s", name, host_name)
                    stats['errors'] += 1
                    continue
                cursor.execute(
                    "INSERT OR IGNORE INTO host (gall_species_id, host_species_id) VALUES (?, ?)",
                    (species_id, host['id'])
                )

        for entry in sections['glossary']:
            word = entry.get('word') if isinstance(entry, dict) else None
            word = word.strip() if isinstance(word, str) else ''
            if not word:
                stats['errors'] += 1
                continue
            definition, ok_definition = _text_or_none(entry.get('definition'))
            urls, ok_urls = _text_or_none(entry.get('urls'))
            if not (ok_definition and ok_urls):
                stats['errors'] += 1
            cursor.execute("""
                INSERT INTO glossary (word, definition, urls) VALUES (?, ?, ?)
                ON CONFLICT(word) DO UPDATE SET definition = excluded.definition, urls = excluded.urls
            """, (word, definition or '', urls or ''))
            stats['glossary'] += 1

        conn.commit()

        message = (f"Import complete: {stats['families']} families, {stats['species']} species, "
                   f"{stats['glossary']} glossary entries")
        if stats['errors'] > 0:
            message += f", {stats['errors']} errors"
        return True, message, stats

    except Exception as e:
        conn.rollback()
        logger.exception("Catalogue import failed")
        return False, f"Import failed: {e}", stats
    finally:
        conn.close()


def get_catalogue_stats() -> Dict[str, int]:
    """Counts shown on the home page."""
    conn = get_db()
    try:
        return {
            'galls': conn.execute(
                "SELECT COUNT(*) FROM species WHERE taxoncode = ?", (GALL_TAXON,)
            ).fetchone()[0],
            'hosts': conn.execute(
                "SELECT COUNT(*) FROM species WHERE taxoncode = ?", (HOST_TAXON,)
            ).fetchone()[0],
            'families': conn.execute("SELECT COUNT(*) FROM family").fetchone()[0],
        }
    finally:
        conn.close()
