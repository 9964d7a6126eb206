from __future__ import annotations

from datetime import datetime
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.channel.telegram import TelegramError
from app.core.config import Settings
from app.database.session import create_db_engine, create_session_factory, init_db


ADMIN_TOKEN = "admin-secret"
CRON_SECRET = "cron-secret"
INVITE_LINK = "https://t.me/+bookflix-reading-room"


def pytest_configure(config):
    config.addinivalue_line("markers", "payment: mark test as payment-related")
    config.addinivalue_line("markers", "admin: mark test as admin-panel related")


def parse_dt(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class FakeChannel:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.granted = []
        self.revoked = []

    def grant(self, user_id: int) -> None:
        if user_id in self.failing:
            raise TelegramError("Bad Request: user not found")
        self.granted.append(user_id)

    def revoke(self, user_id: int) -> None:
        if user_id in self.failing:
            raise TelegramError("Bad Request: user not found")
        self.revoked.append(user_id)


class FakeBot:
    def __init__(self, *, link: Optional[str] = INVITE_LINK):
        self.link = link
        self.sent = []
        self.fail_send = False
        self.photo_url: Optional[str] = None

    def get_channel_link(self) -> Optional[str]:
        return self.link

    def send_message(self, user_id: int, text: str) -> dict:
        if self.fail_send:
            raise TelegramError("Forbidden: bot was blocked by the user")
        self.sent.append((user_id, text))
        return {"message_id": len(self.sent)}

    def get_profile_photo_url(self, user_id: int) -> Optional[str]:
        return self.photo_url


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'bookflix.db'}",
        admin_secret_token=ADMIN_TOKEN,
        cron_secret=CRON_SECRET,
        webapp_url="https://bookflix.test",
        telegram_bot_token="",
        telegram_channel_id="",
        channel_invite_link="",
        api_prefix="",
        max_grant_days=3650,
    )


@pytest.fixture
def session_factory(settings):
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def fake_bot() -> FakeBot:
    return FakeBot()


@pytest.fixture
def app(settings, fake_bot, fake_channel):
    application = create_app(settings, telegram=fake_bot, channel=fake_channel)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers() -> dict:
    return {"X-Admin-Token": ADMIN_TOKEN}
