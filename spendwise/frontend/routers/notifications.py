from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from spendwise.core.data_models import Notification

from ..context import AppContext, get_context
from ..schemas import RemovedResponse

router = APIRouter(prefix="/api", tags=["notifications"])


@router.get("/notifications", response_model=List[Notification])
async def list_notifications(ctx: AppContext = Depends(get_context)):
    return ctx.ui.notifications


@router.delete("/notifications/{notification_id}", response_model=RemovedResponse)
async def remove_notification(notification_id: str, ctx: AppContext = Depends(get_context)):
    return RemovedResponse(removed=ctx.ui.remove_notification(notification_id))


@router.delete("/notifications", response_model=List[Notification])
async def clear_notifications(ctx: AppContext = Depends(get_context)):
    ctx.ui.clear_notifications()
    return ctx.ui.notifications
