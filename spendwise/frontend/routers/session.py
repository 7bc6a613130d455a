from __future__ import annotations

from fastapi import APIRouter, Depends

from spendwise.core.data_models import LoginCredentials, RegisterData

from ..context import AppContext, get_context
from ..schemas import SessionResponse

router = APIRouter(prefix="/api", tags=["session"])


@router.get("/session", response_model=SessionResponse)
async def get_session(ctx: AppContext = Depends(get_context)):
    return SessionResponse.from_state(ctx.session.state)


@router.post("/session/login", response_model=SessionResponse)
async def login(credentials: LoginCredentials, ctx: AppContext = Depends(get_context)):
    return SessionResponse.from_state(await ctx.session.login(credentials))


@router.post("/session/register", response_model=SessionResponse)
async def register(user_data: RegisterData, ctx: AppContext = Depends(get_context)):
    return SessionResponse.from_state(await ctx.session.register(user_data))


@router.delete("/session", response_model=SessionResponse)
async def logout(ctx: AppContext = Depends(get_context)):
    return SessionResponse.from_state(await ctx.session.logout())
