"""
Append-only history and immutable provenance.

Verifies:
- BatchHistoryEntry rows cannot be updated or deleted through the ORM
- Batch origin / harvest_date cannot change after registration
- Owner, quantity, certifications and status stay mutable
"""

import pytest
from sqlalchemy import select

from provenance_kernel.exceptions import ImmutabilityViolationError
from provenance_kernel.models.batch import Batch
from provenance_kernel.models.batch_history import BatchHistoryEntry
from tests.conftest import ADMIN, ALICE


def _first_entry(session, batch_id):
    return session.execute(
        select(BatchHistoryEntry)
        .where(BatchHistoryEntry.batch_id == batch_id)
        .order_by(BatchHistoryEntry.position)
    ).scalars().first()


def _batch_row(session, batch_id):
    return session.execute(select(Batch).where(Batch.batch_id == batch_id)).scalar_one()


class TestHistoryEntryImmutability:
    def test_update_blocked(self, session, register_batch):
        batch_id = register_batch()
        entry = _first_entry(session, batch_id)

        entry.to_ref = ALICE
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "BatchHistoryEntry"
        session.rollback()

    def test_delete_blocked(self, session, register_batch):
        batch_id = register_batch()
        entry = _first_entry(session, batch_id)

        session.delete(entry)
        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

    def test_blocked_update_is_logged(self, session, register_batch, captured_logs):
        batch_id = register_batch()
        entry = _first_entry(session, batch_id)

        entry.actor = ALICE
        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

        blocked = [r for r in captured_logs() if r["message"] == "immutability_violation_blocked"]
        assert blocked
        assert blocked[0]["entity_type"] == "BatchHistoryEntry"


class TestBatchProvenanceImmutability:
    @pytest.mark.parametrize(
        "field, value",
        [("origin", "Somewhere else"), ("harvest_date", 1), ("batch_id", 77)],
    )
    def test_provenance_update_blocked(self, session, register_batch, field, value):
        batch_id = register_batch()
        row = _batch_row(session, batch_id)

        setattr(row, field, value)
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert field in exc_info.value.reason
        session.rollback()

    def test_mutable_fields_update(self, session, register_batch):
        batch_id = register_batch()
        row = _batch_row(session, batch_id)

        row.owner = ALICE
        row.quantity = 10
        row.status = "verified"
        row.certifications = ["CertA", "CertB"]
        session.flush()

        session.expire_all()
        row = _batch_row(session, batch_id)
        assert (row.owner, row.quantity, row.status) == (ALICE, 10, "verified")
        assert row.certifications == ["CertA", "CertB"]
        assert row.origin == "Forest XYZ"


def test_history_append_still_allowed(lifecycle_engine, ledger_context, register_batch, history_log):
    batch_id = register_batch()
    lifecycle_engine.transfer_ownership(ledger_context, ADMIN, batch_id, ALICE)
    assert history_log.length(batch_id) == 2
