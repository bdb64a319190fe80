"""
scripts/load_catalogue.py — Load a JSON catalogue into the gall database.

Usage:
    python scripts/load_catalogue.py scripts/sample_catalogue.json
    GALL_DB_PATH=/tmp/galls.db python scripts/load_catalogue.py data.json
"""

import argparse
import json
import logging
import os
import sys

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import init_db, seed_defaults, import_catalogue_json  # noqa: E402


def main(argv=None):
    parser = argparse.ArgumentParser(description="Import families, species, galls and glossary entries.")
    parser.add_argument('path', help="JSON file to import")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    with open(args.path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    init_db()
    seed_defaults()
    success, message, stats = import_catalogue_json(data)
    print(message)
    return 0 if success and stats.get('errors', 0) == 0 else 1


if __name__ == '__main__':
    sys.exit(main())
