from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..context import AppContext, get_context
from ..schemas import DisconnectConfirmRequest, LinkExitRequest, LinkSuccessRequest
from . import mutation_response

router = APIRouter(prefix="/api", tags=["link"])


@router.get("/link")
async def get_link_state(ctx: AppContext = Depends(get_context)):
    return ctx.link.snapshot()


@router.post("/link/start")
async def start_link(ctx: AppContext = Depends(get_context)):
    await ctx.link.start()
    snapshot = ctx.link.snapshot()
    snapshot["link_token"] = getattr(ctx.link.widget, "token", None)
    return snapshot


@router.post("/link/success")
async def link_success(req: LinkSuccessRequest, ctx: AppContext = Depends(get_context)):
    result = await ctx.link.handle_success(req.public_token, req.metadata)
    return {**ctx.link.snapshot(), "result": mutation_response(result)}


@router.post("/link/exit")
async def link_exit(req: LinkExitRequest, ctx: AppContext = Depends(get_context)):
    await ctx.link.handle_exit(req.error, req.metadata)
    return ctx.link.snapshot()


# Declared before the parametrized route so "confirm" is not read as an account id.
@router.post("/link/disconnect/confirm")
async def confirm_disconnect(
    req: Optional[DisconnectConfirmRequest] = None,
    ctx: AppContext = Depends(get_context),
):
    try:
        result = await ctx.link.confirm_disconnect(req.options if req else None)
    except RuntimeError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {**ctx.link.snapshot(), "result": mutation_response(result)}


@router.post("/link/disconnect/{account_id}")
async def request_disconnect(account_id: int, ctx: AppContext = Depends(get_context)):
    accounts = await ctx.dashboard.load_accounts()
    account = next((item for item in accounts.accounts if item.id == account_id), None)
    if account is None:
        raise HTTPException(status_code=404, detail=f"Account {account_id} not found.")
    ctx.link.request_disconnect(account)
    return ctx.link.snapshot()


@router.delete("/link/disconnect")
async def cancel_disconnect(ctx: AppContext = Depends(get_context)):
    ctx.link.cancel_disconnect()
    return ctx.link.snapshot()
