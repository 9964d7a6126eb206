from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.channel.services import run_membership_sweep
from app.core.channel.telegram import ChannelMembership
from app.core.dependencies import get_channel, get_db, require_cron_secret


router = APIRouter(tags=["cron"])


@router.post(
    "/cron",
    summary="Reconcile channel membership with subscription access",
)
def cron(
    _: None = Depends(require_cron_secret),
    db: Session = Depends(get_db),
    channel: ChannelMembership = Depends(get_channel),
) -> dict:
    result = run_membership_sweep(db, channel)
    return {
        "success": True,
        "message": "Channel access updated",
        **result.as_dict(),
    }


__all__ = ["router"]
