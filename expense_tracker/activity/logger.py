"""
Activity Logger

DESIGN DECISION: Every ledger operation is logged locally.
This provides:
1. Debugging capability
2. A visible trace of storage failures

The activity logger:
- Logs locally only (structlog to stdout); nothing is persisted
- Is not an audit trail and is never read back by the application
"""

import logging
import sys
from typing import Optional

import structlog

from expense_tracker.models.transaction import Transaction


def _processors(json_output: bool) -> list:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of the standard library logger.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
    structlog.configure(
        processors=_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging
configure_logging()


class ActivityLogger:
    """
    Central logging service for ledger activity.

    One instance per session, bound to the storage key it works on.
    """

    def __init__(self, storage_key: Optional[str] = None):
        """
        Initialize activity logger.

        Args:
            storage_key: Key the session persists under, bound to every event
        """
        self._logger = structlog.get_logger("expense_tracker")
        if storage_key is not None:
            self._logger = self._logger.bind(storage_key=storage_key)

    def ledger_loaded(self, count: int) -> None:
        self._logger.info("ledger_loaded", transaction_count=count)

    def ledger_load_failed(self, error: Exception) -> None:
        self._logger.error(
            "ledger_load_failed",
            error=str(error),
            error_type=type(error).__name__,
        )

    def transaction_added(self, transaction: Transaction) -> None:
        self._logger.info(
            "transaction_added",
            transaction_id=transaction.id,
            type=transaction.type.value,
            category=transaction.category.value,
            amount=str(transaction.amount),
            date=transaction.date.isoformat(),
        )

    def transaction_rejected(self, issues: list[dict]) -> None:
        """Log an add request that failed validation."""
        self._logger.warning("transaction_rejected", issues=issues)

    def transaction_deleted(self, transaction_id: int) -> None:
        self._logger.info("transaction_deleted", transaction_id=transaction_id)

    def delete_missed(self, transaction_id: int) -> None:
        self._logger.debug("delete_missed", transaction_id=transaction_id)

    def persist_failed(self, operation: str, error: Exception) -> None:
        """Log a save that did not reach storage."""
        self._logger.error(
            "ledger_persist_failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
        )
