from __future__ import annotations

from typing import Any, Dict

from loguru import logger
from sqlalchemy.orm import sessionmaker

from app.core.channel.services import run_membership_sweep
from app.core.channel.telegram import ChannelMembership, TelegramBotClient
from app.core.config import settings
from app.database.session import create_db_engine, create_session_factory
from bookflix_bg_worker.celery_app import celery_app


_session_factory = None


def _get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(
            create_db_engine(settings.database_url)
        )
    return _session_factory


def sweep_membership(
    session_factory: sessionmaker,
    channel: ChannelMembership,
) -> Dict[str, Any]:
    db = session_factory()
    try:
        result = run_membership_sweep(db, channel)
        return result.as_dict()
    except Exception as exc:
        logger.opt(exception=exc).error("Membership sweep task failed")
        db.rollback()
        raise
    finally:
        db.close()


@celery_app.task(name="membership.sweep")
def sweep_channel_membership() -> Dict[str, Any]:
    logger.info("Running membership.sweep task")
    return sweep_membership(
        _get_session_factory(),
        TelegramBotClient.from_settings(settings),
    )


__all__ = ["sweep_membership", "sweep_channel_membership"]
