"""Bookstore HTTP API package."""
