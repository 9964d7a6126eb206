from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.core.channel.services import run_membership_sweep
from app.core.messages.services import append_message
from app.core.subscriptions import services as ledger
from app.core.subscriptions.models import Subscription

from tests.conftest import FakeChannel


NOW = datetime(2026, 7, 1, 0, 0, tzinfo=timezone.utc)


def test_gate_is_true_for_active_unexpired_row(db):
    ledger.activate(db, user_id=1, days=30, payment_id="p-1", now=NOW)
    db.commit()

    assert ledger.has_active_access(db, 1, now=NOW)
    assert ledger.has_active_access(db, 1, now=NOW + timedelta(days=29, hours=23))


def test_gate_is_false_without_row(db):
    assert not ledger.has_active_access(db, 404, now=NOW)


def test_gate_is_false_right_after_cancel(db):
    ledger.activate(db, user_id=2, days=3650, payment_id="p-1", now=NOW)
    ledger.cancel(db, user_id=2)
    db.commit()

    assert not ledger.has_active_access(db, 2, now=NOW)


def test_gate_turns_false_when_time_passes_end_without_writes(db):
    ledger.activate(db, user_id=3, days=1, payment_id="p-1", now=NOW)
    db.commit()
    updated_before = db.query(Subscription.updated_at).filter_by(user_id=3).scalar()

    assert ledger.has_active_access(db, 3, now=NOW + timedelta(hours=23))
    assert not ledger.has_active_access(db, 3, now=NOW + timedelta(days=1))
    assert not ledger.has_active_access(db, 3, now=NOW + timedelta(days=1, seconds=1))

    row = db.query(Subscription).filter_by(user_id=3).one()
    assert row.status == "active"
    assert row.updated_at == updated_before


def test_sweep_grants_and_revokes_per_gate(db):
    ledger.activate(db, user_id=10, days=30, payment_id="p-10", now=NOW)
    ledger.activate(db, user_id=11, days=1, payment_id="p-11", now=NOW - timedelta(days=5))
    ledger.activate(db, user_id=12, days=30, payment_id="p-12", now=NOW)
    ledger.cancel(db, user_id=12)
    append_message(db, user_id=13, text="how do I pay?", direction="from_user")
    db.commit()

    channel = FakeChannel()
    result = run_membership_sweep(db, channel, now=NOW)

    assert channel.granted == [10]
    assert sorted(channel.revoked) == [11, 12, 13]
    assert result.as_dict() == {"granted": 1, "revoked": 3, "failed": 0, "total": 4}


def test_sweep_counts_failures_and_continues(db):
    ledger.activate(db, user_id=20, days=30, payment_id="p-20", now=NOW)
    ledger.activate(db, user_id=21, days=30, payment_id="p-21", now=NOW)
    ledger.set_subscription(db, user_id=22, status="inactive")
    db.commit()

    channel = FakeChannel(failing={20})
    result = run_membership_sweep(db, channel, now=NOW)

    assert channel.granted == [21]
    assert channel.revoked == [22]
    assert result.failed == 1
    assert result.total == 3


def test_sweep_on_empty_store(db):
    result = run_membership_sweep(db, FakeChannel(), now=NOW)
    assert result.as_dict() == {"granted": 0, "revoked": 0, "failed": 0, "total": 0}
