"""Shared FastAPI dependencies."""

from datetime import UTC, date, datetime, time

from fastapi import Request

from bookstore.payments.port import PaymentGateway


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


def start_of_day(day: date | None) -> datetime | None:
    return datetime.combine(day, time.min, tzinfo=UTC) if day is not None else None


def end_of_day(day: date | None) -> datetime | None:
    """Inclusive upper bound: the last instant of ``day``."""
    return datetime.combine(day, time.max, tzinfo=UTC) if day is not None else None
