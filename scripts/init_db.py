"""
Create the learning database tables.

Safe to run repeatedly; existing tables are left alone.

Usage:
    python -m scripts.init_db
"""

import logging

from zi import config
from zi.factory import get_repository


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    url = config.get_database_url()
    get_repository(url)
    print(f"Learning tables ready ({url})")


if __name__ == "__main__":
    main()
