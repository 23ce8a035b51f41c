"""Bookstore management CLI.

Usage:
    python src/manage.py setup-db     # Create all tables
    python src/manage.py drop-db      # Drop all tables
    python src/manage.py seed-books   # Load a handful of sample books
"""

import argparse
import sys

SAMPLE_BOOKS = [
    {
        "title": "The Pragmatic Programmer",
        "author": "Andrew Hunt",
        "isbn": "9780135957059",
        "category": "Software",
        "price": 39.99,
        "original_price": 49.99,
        "quantity": 25,
        "is_featured": True,
    },
    {
        "title": "Dune",
        "author": "Frank Herbert",
        "isbn": "9780441172719",
        "category": "Fiction",
        "price": 18.0,
        "quantity": 40,
    },
    {
        "title": "A Brief History of Time",
        "author": "Stephen Hawking",
        "isbn": "9780553380163",
        "category": "Science",
        "price": 15.5,
        "quantity": 8,
        "format": "hardcover",
    },
]


def _domain():
    from bookstore.domain import bookstore
    from bookstore.utils.logging import configure_logging

    configure_logging()
    bookstore.init()
    return bookstore


def setup_database():
    from bookstore.utils.db import setup_db

    print("Creating bookstore database schema...")
    setup_db(_domain())
    print("Done.")


def drop_database():
    from bookstore.utils.db import drop_db

    print("Dropping bookstore database schema...")
    drop_db(_domain())
    print("Done.")


def seed_books():
    from bookstore.catalogue.creation import AddBook

    domain = _domain()
    with domain.domain_context():
        for book in SAMPLE_BOOKS:
            book_id = domain.process(AddBook(**book), asynchronous=False)
            print(f"  added {book['title']} ({book_id})")
    print(f"Seeded {len(SAMPLE_BOOKS)} books.")


def main():
    parser = argparse.ArgumentParser(description="Bookstore management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed-books", help="Add sample books to the catalogue")

    args = parser.parse_args()

    commands = {
        "setup-db": setup_database,
        "drop-db": drop_database,
        "seed-books": seed_books,
    }
    commands[args.command]()
    return 0


if __name__ == "__main__":
    sys.exit(main())
