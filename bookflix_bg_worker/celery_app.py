from __future__ import annotations

import socket
from typing import Iterable

from celery import Celery
from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.config import settings


LOCAL_BROKER_URL = "redis://localhost:6379/0"


def _choose_broker_url(candidates: Iterable[str]) -> str:
    """
    Return the first reachable Redis broker.

    The configured URL (redis://redis:6379/0 under docker-compose) comes
    first, the local Redis second; the last candidate's error propagates.
    """
    urls = list(dict.fromkeys(candidates))
    for url in urls[:-1]:
        try:
            Redis.from_url(url).ping()
            return url
        except (RedisConnectionError, socket.gaierror):
            continue

    Redis.from_url(urls[-1]).ping()
    return urls[-1]


broker_url = _choose_broker_url([settings.celery_broker_url, LOCAL_BROKER_URL])

celery_app = Celery(
    "bookflix_bg_worker",
    broker=broker_url,
)

celery_app.conf.beat_schedule = {
    "membership-sweep": {
        "task": "membership.sweep",
        "schedule": float(settings.membership_sweep_interval_seconds),
    },
}

celery_app.autodiscover_tasks(
    packages=["bookflix_bg_worker"],
)


__all__ = ["celery_app"]
