from __future__ import annotations

from fastapi import APIRouter, Depends

from spendwise.core.data_models import AccountsResponse

from ..context import AppContext, get_context
from ..schemas import MutationResponse
from . import mutation_response

router = APIRouter(prefix="/api", tags=["accounts"])


@router.get("/accounts", response_model=AccountsResponse)
async def list_accounts(ctx: AppContext = Depends(get_context)):
    return await ctx.dashboard.load_accounts()


@router.post("/accounts/sync", response_model=MutationResponse)
async def sync_all_accounts(ctx: AppContext = Depends(get_context)):
    return mutation_response(await ctx.account_actions.sync_all())


@router.post("/accounts/{account_id}/sync", response_model=MutationResponse)
async def sync_account(account_id: int, ctx: AppContext = Depends(get_context)):
    return mutation_response(await ctx.account_actions.sync_account(account_id))
