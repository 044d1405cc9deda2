"""OrderDesk database management CLI.

Creates or drops the RDBMS schema for the OrderDesk domain. Only needed
when PROTEAN_ENV selects a SQL provider (e.g. production → PostgreSQL).

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    from orderdesk.domain import orderdesk
    from orderdesk.utils.db import setup_db

    print("Initializing orderdesk domain...")
    orderdesk.init()
    print("Creating orderdesk database schema...")
    setup_db(orderdesk)
    print("Done.")


def drop_database():
    from orderdesk.domain import orderdesk
    from orderdesk.utils.db import drop_db

    print("Initializing orderdesk domain...")
    orderdesk.init()
    print("Dropping orderdesk database schema...")
    drop_db(orderdesk)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="OrderDesk database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
