"""
Bulk-load ratings into the rating store.

Reads a JSON array of stored-shape rating documents (each with 'userId',
'time', the conditions fields, 'rating_waveSize' and 'rating_quality') and
upserts them by (userId, time).

Usage:
    swellcast-seed [path/to/ratings.json]
"""

import argparse
import json
import logging
import os
import sys

from swellcast.config import production
from swellcast.surf_model import storage

logger = logging.getLogger(__name__)

DEFAULT_SEED_FILE = os.path.join(production.DATA_DIR, 'sample-ratings.json')


def load_seed_file(path):
    """
    Read seed entries from a JSON file.

    Raises ValueError unless the file holds a non-empty array.
    """
    with open(path, 'r') as f:
        entries = json.load(f)

    if not isinstance(entries, list) or not entries:
        raise ValueError('Seed data must be a non-empty array')
    return entries


def main(argv=None):
    parser = argparse.ArgumentParser(description='Upsert surf ratings from a JSON file')
    parser.add_argument('path', nargs='?', default=DEFAULT_SEED_FILE, help='Seed data file')
    args = parser.parse_args(argv)

    logging.basicConfig(level=production.LOG_LEVEL, format=production.LOG_FORMAT)

    path = os.path.abspath(args.path)
    print(f"Loading seed data from {path}")

    try:
        entries = load_seed_file(path)
        result = storage.upsert_ratings(entries)
    except Exception as e:
        logger.error(f"Seed failed: {e}", exc_info=True)
        print(f"Seed failed: {e}", file=sys.stderr)
        return 1

    print(f"Upserted {result['upserted']}, modified {result['modified']}.")
    print("Seed completed")
    return 0


if __name__ == '__main__':
    sys.exit(main())
