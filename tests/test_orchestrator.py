"""
Tests for the session controller.

Storage is in memory; persistence failures are simulated with a store
whose writes can be switched off.
"""

import datetime as dt
import json
from decimal import Decimal

import pytest
from pydantic import ValidationError as ModelValidationError
from structlog.testing import capture_logs

from expense_tracker.activity import ActivityLogger
from expense_tracker.config import Settings
from expense_tracker.ledger import Ledger
from expense_tracker.models import NoticeLevel, TransactionCategory, TransactionFilter
from expense_tracker.orchestrator import LedgerSession, create_app_components
from expense_tracker.services.storage import (
    BlobTransactionStorage,
    CorruptDataError,
    InMemoryKeyValueStore,
    StorageUnavailableError,
)


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store whose writes fail while `available` is False."""

    def __init__(self):
        super().__init__()
        self.available = True

    def set(self, key, value):
        if not self.available:
            raise StorageUnavailableError("storage quota exceeded")
        super().set(key, value)


def open_session(store=None) -> LedgerSession:
    return LedgerSession.open(BlobTransactionStorage(store or InMemoryKeyValueStore()))


def add_coffee(session: LedgerSession):
    return session.add_transaction("Coffee", "4.50", "food", "expense", "2024-01-15")


class TestSessionAdd:
    """Tests for LedgerSession.add_transaction."""

    def test_add_persists_whole_ledger(self):
        """Test that a successful add is saved."""
        store = InMemoryKeyValueStore()
        session = open_session(store)

        result = add_coffee(session)

        assert result.changed is True
        assert result.persisted is True
        assert result.ok is True
        assert result.notice.level == NoticeLevel.SUCCESS
        assert json.loads(store.get("transactions"))[0]["description"] == "Coffee"

    def test_validation_failure_is_a_notice(self):
        """Test that invalid input returns an error notice and changes nothing."""
        store = InMemoryKeyValueStore()
        session = open_session(store)

        result = session.add_transaction("", "0", "food", "expense", "2024-01-15")

        assert result.changed is False
        assert result.ok is False
        assert result.notice.level == NoticeLevel.ERROR
        assert "Description is required" in result.notice.message
        assert len(session.ledger) == 0
        assert store.get("transactions") is None

    def test_rejection_notice_names_the_problem(self):
        """Test the notice for a filled-in form with a bad amount."""
        result = open_session().add_transaction("Coffee", "-3", "food", "expense", "2024-01-15")

        assert result.notice.message == (
            "Could not add transaction: Amount must be greater than zero"
        )

    def test_persist_failure_keeps_memory_and_warns(self):
        """The in-memory ledger stays authoritative when saving fails."""
        store = FlakyStore()
        session = open_session(store)
        store.available = False

        result = add_coffee(session)

        assert result.changed is True
        assert result.persisted is False
        assert result.notice.level == NoticeLevel.WARNING
        assert "may not survive a reload" in result.notice.message
        assert len(session.ledger) == 1
        assert store.get("transactions") is None

    def test_retry_persist_after_failure(self):
        """Test that the user can retry a failed save."""
        store = FlakyStore()
        session = open_session(store)
        store.available = False
        add_coffee(session)

        assert session.retry_persist().persisted is False
        store.available = True
        assert session.retry_persist().persisted is True
        assert len(json.loads(store.get("transactions"))) == 1


class TestSessionDelete:
    """Tests for LedgerSession.delete_transaction."""

    def test_delete_persists(self):
        """Test that a removal is saved."""
        store = InMemoryKeyValueStore()
        session = open_session(store)
        transaction = add_coffee(session).transaction

        result = session.delete_transaction(transaction.id)

        assert result.changed is True
        assert result.persisted is True
        assert result.transaction == transaction
        assert json.loads(store.get("transactions")) == []

    def test_delete_missing_does_not_touch_storage(self):
        """Deleting an unknown id is a quiet no-op."""
        store = FlakyStore()
        session = open_session(store)
        store.available = False

        result = session.delete_transaction(42)

        assert result.changed is False
        assert result.notice.level == NoticeLevel.INFO

    def test_delete_persist_failure_warns(self):
        """Test the warning when a delete cannot be saved."""
        store = FlakyStore()
        session = open_session(store)
        transaction = add_coffee(session).transaction
        store.available = False

        result = session.delete_transaction(transaction.id)

        assert result.changed is True
        assert result.persisted is False
        assert result.notice.level == NoticeLevel.WARNING
        assert len(session.ledger) == 0


class TestSessionLoad:
    """Tests for opening a session from storage."""

    def test_reopen_sees_saved_transactions(self):
        """Test that a new session starts from the persisted ledger."""
        store = InMemoryKeyValueStore()
        first = open_session(store)
        add_coffee(first)
        first.add_transaction("Paycheck", 2000, "salary", "income", "2024-01-20")

        second = open_session(store)
        assert [t.description for t in second.ledger] == ["Paycheck", "Coffee"]

    def test_new_ids_stay_above_loaded_ids(self):
        """Test that ids from an earlier session are never reissued."""
        store = InMemoryKeyValueStore()
        first = open_session(store)
        old_id = add_coffee(first).transaction.id

        second = open_session(store)
        assert add_coffee(second).transaction.id > old_id

    def test_corrupt_data_raises(self):
        """Corrupt data fails loudly instead of starting empty."""
        store = InMemoryKeyValueStore({"transactions": "{oops"})
        with capture_logs() as logs:
            with pytest.raises(CorruptDataError):
                LedgerSession.open(BlobTransactionStorage(store), ActivityLogger())
        assert logs[0]["event"] == "ledger_load_failed"
        assert logs[0]["log_level"] == "error"


class TestSessionView:
    """Tests for filters and the rendering contract."""

    def make_session(self) -> LedgerSession:
        session = open_session()
        session.add_transaction("Coffee", 4.50, "food", "expense", "2024-01-15")
        session.add_transaction("Paycheck", 2000, "salary", "income", "2024-01-20")
        session.add_transaction("Bus pass", 30, "transport", "expense", "2024-02-02")
        return session

    def test_view_scenario(self):
        """Test the full view for a small ledger."""
        view = self.make_session().view(dt.date(2024, 2, 15))

        assert [t.description for t in view.transactions] == ["Bus pass", "Paycheck", "Coffee"]
        assert view.summary.balance == Decimal("1965.50")
        assert view.category_totals == {
            TransactionCategory.TRANSPORT: Decimal("30"),
            TransactionCategory.FOOD: Decimal("4.50"),
        }
        assert view.category_chart.labels == ["Transport", "Food"]
        assert view.monthly_chart.labels[-2:] == ["Jan 2024", "Feb 2024"]
        assert view.monthly_chart.income[-2:] == [Decimal("2000"), Decimal("0")]
        assert view.monthly_chart.expenses[-2:] == [Decimal("4.50"), Decimal("30")]
        assert len(view.monthly) == 6

    def test_filter_only_changes_the_list(self):
        """Summary and aggregates ignore the active filter."""
        session = self.make_session()
        unfiltered = session.view(dt.date(2024, 2, 15))

        session.set_filter(category="food")
        filtered = session.view(dt.date(2024, 2, 15))

        assert [t.description for t in filtered.transactions] == ["Coffee"]
        assert filtered.summary == unfiltered.summary
        assert filtered.category_totals == unfiltered.category_totals
        assert filtered.monthly == unfiltered.monthly

    def test_set_filter_keeps_other_field(self):
        """Test that setting one field leaves the other alone."""
        session = self.make_session()
        session.set_filter(type="expense")
        session.set_filter(category="transport")
        assert session.filter == TransactionFilter(category="transport", type="expense")

    def test_clear_filters(self):
        """Test resetting to {all, all}."""
        session = self.make_session()
        session.set_filter(category="food", type="income")
        assert session.view().is_empty is True
        session.clear_filters()
        assert session.filter.is_default is True
        assert len(session.filtered_transactions()) == 3

    def test_unknown_filter_value_rejected(self):
        """Test that the filter only accepts known values."""
        with pytest.raises(ModelValidationError):
            self.make_session().set_filter(type="transfer")

    def test_default_form_date_is_today(self):
        """Test the date the add form resets to."""
        assert LedgerSession.default_form_date() == dt.date.today()


class TestActivityLogging:
    """Tests for activity events emitted by the session."""

    def test_add_and_reject_are_logged(self):
        """Test the events for a good and a bad add."""
        with capture_logs() as logs:
            session = LedgerSession(
                Ledger(),
                BlobTransactionStorage(InMemoryKeyValueStore()),
                ActivityLogger(),
            )
            add_coffee(session)
            session.add_transaction("", 1, "food", "expense", "2024-01-15")

        events = [entry["event"] for entry in logs]
        assert events == ["transaction_added", "transaction_rejected"]
        assert logs[0]["category"] == "food"
        assert logs[1]["issues"][0]["field"] == "description"

    def test_persist_failure_is_logged(self):
        """Storage failures are never silent."""
        store = FlakyStore()
        store.available = False
        with capture_logs() as logs:
            session = LedgerSession(
                Ledger(),
                BlobTransactionStorage(store),
                ActivityLogger(),
            )
            add_coffee(session)

        failures = [entry for entry in logs if entry["event"] == "ledger_persist_failed"]
        assert len(failures) == 1
        assert failures[0]["operation"] == "add"
        assert "quota" in failures[0]["error"]


class TestAppComponents:
    """Tests for create_app_components."""

    def test_memory_backend(self, monkeypatch):
        """Test wiring with the in-memory backend from the environment."""
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "memory")
        session, storage = create_app_components(Settings())
        assert len(session.ledger) == 0
        add_coffee(session)
        assert len(storage.load()) == 1

    def test_file_backend(self, monkeypatch, tmp_path):
        """Test wiring with the JSON file backend."""
        path = tmp_path / "ledger.json"
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "file")
        monkeypatch.setenv("LEDGER_STORAGE_PATH", str(path))

        session, _ = create_app_components(Settings())
        add_coffee(session)

        reopened, _ = create_app_components(Settings())
        assert [t.description for t in reopened.ledger] == ["Coffee"]
        assert path.exists()

    def test_store_override(self):
        """Test passing a store explicitly."""
        store = InMemoryKeyValueStore()
        session, _ = create_app_components(Settings(), store=store)
        add_coffee(session)
        assert store.get("transactions") is not None
