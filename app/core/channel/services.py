from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.core.channel.telegram import ChannelMembership
from app.core.subscriptions import services as ledger


@dataclass
class SweepResult:
    granted: int = 0
    revoked: int = 0
    failed: int = 0
    total: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def run_membership_sweep(
    db: Session,
    channel: ChannelMembership,
    *,
    now: Optional[datetime] = None,
) -> SweepResult:
    """
    Grant channel membership to every known user with access, revoke it from
    the rest. Users are handled independently; one failure never stops the
    pass.
    """
    now = ledger.as_utc(now) or ledger.utc_now()
    user_ids = ledger.list_known_user_ids(db)
    result = SweepResult(total=len(user_ids))

    logger.info("Membership sweep started", total=result.total)
    for user_id in user_ids:
        try:
            if ledger.has_active_access(db, user_id, now=now):
                channel.grant(user_id)
                result.granted += 1
            else:
                channel.revoke(user_id)
                result.revoked += 1
        except Exception as exc:
            result.failed += 1
            logger.warning(
                "Membership sweep failed for user {user_id}: {error}",
                user_id=user_id,
                error=str(exc),
            )

    logger.info(
        "Membership sweep finished",
        granted=result.granted,
        revoked=result.revoked,
        failed=result.failed,
        total=result.total,
    )
    return result


__all__ = ["SweepResult", "run_membership_sweep"]
