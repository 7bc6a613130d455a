from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends

from spendwise.core.data_models import TransactionFilters, TransactionsResponse

from ..context import AppContext, get_context
from ..schemas import CategorizeRequest, MutationResponse
from . import mutation_response

router = APIRouter(prefix="/api", tags=["transactions"])


@router.get("/transactions", response_model=TransactionsResponse)
async def list_transactions(
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    account_id: Optional[int] = None,
    category_id: Optional[int] = None,
    type: Optional[Literal["expenses", "income"]] = None,
    pending: Optional[bool] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    sort: Optional[Literal["date_asc", "date_desc", "amount_asc", "amount_desc"]] = None,
    ctx: AppContext = Depends(get_context),
):
    filters = TransactionFilters(
        page=page,
        per_page=per_page,
        account_id=account_id,
        category_id=category_id,
        type=type,
        pending=pending,
        start_date=start_date,
        end_date=end_date,
        search=search,
        sort=sort,
    )
    return await ctx.dashboard.load_transactions(filters)


@router.put("/transactions/{transaction_id}/categorize", response_model=MutationResponse)
async def categorize_transaction(
    transaction_id: int,
    req: CategorizeRequest,
    ctx: AppContext = Depends(get_context),
):
    result = await ctx.account_actions.categorize(transaction_id, req.category_id, req.confidence_score)
    return mutation_response(result)
