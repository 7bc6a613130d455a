from __future__ import annotations

from fastapi import APIRouter, Depends

from spendwise.core.data_models import CategoriesResponse, CategoryInput

from ..context import AppContext, get_context
from ..schemas import MutationResponse
from . import mutation_response

router = APIRouter(prefix="/api", tags=["categories"])


@router.get("/categories", response_model=CategoriesResponse)
async def list_categories(ctx: AppContext = Depends(get_context)):
    return await ctx.dashboard.load_categories()


@router.post("/categories", response_model=MutationResponse)
async def create_category(data: CategoryInput, ctx: AppContext = Depends(get_context)):
    return mutation_response(await ctx.category_actions.create(data))


@router.put("/categories/{category_id}", response_model=MutationResponse)
async def update_category(category_id: int, data: CategoryInput, ctx: AppContext = Depends(get_context)):
    return mutation_response(await ctx.category_actions.update(category_id, data))


@router.delete("/categories/{category_id}", response_model=MutationResponse)
async def delete_category(category_id: int, ctx: AppContext = Depends(get_context)):
    return mutation_response(await ctx.category_actions.delete(category_id))
