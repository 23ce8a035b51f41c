"""Bookstore FastAPI application.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from bookstore.api.app import create_app
from bookstore.domain import bookstore
from bookstore.payments import build_gateway
from bookstore.utils.logging import configure_logging

# PROTEAN_ENV selects the config overlay ("test", "production", ...)
configure_logging()
bookstore.init()

app = create_app(bookstore, gateway=build_gateway(bookstore))
