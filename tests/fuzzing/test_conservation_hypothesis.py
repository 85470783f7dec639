"""
Hypothesis-based fuzzing of the lifecycle invariants.

Properties:
- Split and merge conserve the total quantity of live batches
- Every live batch keeps a strictly positive quantity
- Identifiers are strictly increasing and never reused
- A refused operation leaves every batch and history untouched

Each example runs against its own in-memory database, so no state leaks
between generated cases.
"""

from contextlib import contextmanager

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from provenance_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from provenance_kernel.domain.clock import DeterministicClock
from provenance_kernel.domain.context import LedgerContext
from provenance_kernel.domain.values import BatchStatus
from provenance_kernel.selectors.batch_selector import BatchSelector
from provenance_kernel.services.provenance_service import ProvenanceLedgerService

ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
VERIFIER = "ST3AM1A56AK2C1XAFJ4115ZSV26EB49BVQ10MGCS0"


@contextmanager
def fresh_ledger():
    init_engine_from_url("sqlite://")
    create_tables()
    session = get_session()
    try:
        yield ProvenanceLedgerService(
            session,
            LedgerContext(administrator=ADMIN, verifier=VERIFIER),
            clock=DeterministicClock(),
        ), BatchSelector(session)
    finally:
        session.close()
        reset_engine()


def _snapshot(ledger, selector, ids):
    return (
        [b.to_dict() for b in selector.list_batches()],
        {i: len(ledger.get_batch_history(i)) for i in ids},
    )


operations = st.lists(
    st.tuples(
        st.sampled_from(["split", "merge", "verify", "transfer"]),
        st.integers(min_value=0, max_value=1000),
        st.integers(min_value=0, max_value=1000),
    ),
    max_size=30,
)


@pytest.mark.slow
@settings(
    max_examples=40,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
@given(
    quantities=st.lists(st.integers(min_value=1, max_value=10_000), min_size=1, max_size=4),
    ops=operations,
)
def test_random_lifecycle_preserves_invariants(quantities, ops):
    with fresh_ledger() as (ledger, selector):
        ids = [
            ledger.register_batch(ADMIN, q, "Forest XYZ", 123456, ["CertA"]).value
            for q in quantities
        ]
        total = sum(quantities)
        assert ids == list(range(1, len(quantities) + 1))

        for op, a, b in ops:
            live = [batch.batch_id for batch in selector.list_batches()]
            target = live[a % len(live)]
            before = _snapshot(ledger, selector, ids)
            next_id = ledger.get_next_batch_id()

            if op == "split":
                result = ledger.split_batch(ADMIN, target, b % 200)
                if result.is_success:
                    assert result.value == next_id
                    assert result.value > max(ids)
                    ids.append(result.value)
            elif op == "merge":
                other = live[b % len(live)]
                result = ledger.merge_batches(ADMIN, target, other)
                if result.is_success:
                    assert ledger.get_batch_details(other) is None
            elif op == "verify":
                status = BatchStatus.VERIFIED if b % 2 else BatchStatus.INVALID
                result = ledger.verify_compliance(VERIFIER, target, status)
                assert result.is_success
            else:
                result = ledger.transfer_ownership(ADMIN, target, ADMIN)
                invalid = ledger.get_batch_details(target).status == BatchStatus.INVALID
                assert result.is_success != invalid

            if not result.is_success:
                assert _snapshot(ledger, selector, ids) == before
                assert ledger.get_next_batch_id() == next_id

            batches = selector.list_batches()
            assert all(batch.quantity > 0 for batch in batches)
            assert sum(batch.quantity for batch in batches) == total
            assert selector.total_quantity() == total


@settings(
    max_examples=60,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
@given(
    quantity=st.integers(min_value=1, max_value=1_000_000),
    split=st.integers(min_value=-10, max_value=1_000_010),
)
def test_split_bounds(quantity, split):
    with fresh_ledger() as (ledger, _):
        ledger.register_batch(ADMIN, quantity, "Forest XYZ", 1, [])

        result = ledger.split_batch(ADMIN, 1, split)

        if 0 < split < quantity:
            assert result.is_success
            assert ledger.get_batch_details(1).quantity == quantity - split
            assert ledger.get_batch_details(2).quantity == split
        else:
            assert result.code == "INSUFFICIENT_QUANTITY"
            assert ledger.get_batch_details(1).quantity == quantity
            assert ledger.get_next_batch_id() == 2
