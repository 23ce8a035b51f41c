"""Bookstore domain: catalogue stock, order lifecycle and payments.

Books (CQRS) hold price and stock counters, Orders (CQRS) carry the
lifecycle state machine. Cross-aggregate side effects such as restoring
stock after a cancellation travel as domain events.
"""

import structlog
from protean.domain import Domain

bookstore = Domain(name="bookstore")

logger = structlog.get_logger(__name__)
