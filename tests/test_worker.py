from __future__ import annotations

import importlib
from types import SimpleNamespace

import pytest
from redis import Redis

from app.core.messages.services import append_message
from app.core.subscriptions import services as ledger

from tests.conftest import FakeChannel


@pytest.fixture
def worker(monkeypatch):
    # celery_app picks its broker at import time by pinging Redis.
    monkeypatch.setattr(Redis, "ping", lambda self, **kwargs: True)
    return importlib.import_module("bookflix_bg_worker.membership_worker")


@pytest.fixture
def seeded(db):
    ledger.activate(db, user_id=1, days=30, payment_id="p-1")
    append_message(db, user_id=2, text="hello", direction="from_user")
    db.commit()


def test_sweep_task_is_registered_and_scheduled(worker):
    celery_app = worker.celery_app

    assert "membership.sweep" in celery_app.tasks
    schedule = celery_app.conf.beat_schedule["membership-sweep"]
    assert schedule["task"] == "membership.sweep"


def test_sweep_task_runs_against_configured_session(worker, monkeypatch, session_factory, seeded):
    channel = FakeChannel()
    monkeypatch.setattr(worker, "_session_factory", session_factory)
    monkeypatch.setattr(
        worker,
        "TelegramBotClient",
        SimpleNamespace(from_settings=lambda settings: channel),
    )

    result = worker.sweep_channel_membership.run()

    assert result == {"granted": 1, "revoked": 1, "failed": 0, "total": 2}
    assert channel.granted == [1]
    assert channel.revoked == [2]


def test_sweep_helper_counts_channel_failures(worker, session_factory, seeded):
    channel = FakeChannel(failing={1})

    result = worker.sweep_membership(session_factory, channel)

    assert result == {"granted": 0, "revoked": 1, "failed": 1, "total": 2}
    assert channel.revoked == [2]
