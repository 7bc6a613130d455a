from __future__ import annotations

from fastapi import APIRouter, Depends

from ..context import AppContext, get_context
from ..schemas import SidebarRequest, ThemeRequest, UIResponse

router = APIRouter(prefix="/api", tags=["ui"])


@router.get("/ui", response_model=UIResponse)
async def get_ui(ctx: AppContext = Depends(get_context)):
    return UIResponse.from_store(ctx.ui)


@router.post("/ui/theme/toggle", response_model=UIResponse)
async def toggle_theme(ctx: AppContext = Depends(get_context)):
    ctx.ui.toggle_theme()
    return UIResponse.from_store(ctx.ui)


@router.put("/ui/theme", response_model=UIResponse)
async def set_theme(req: ThemeRequest, ctx: AppContext = Depends(get_context)):
    ctx.ui.set_theme(req.theme)
    return UIResponse.from_store(ctx.ui)


@router.post("/ui/sidebar/toggle", response_model=UIResponse)
async def toggle_sidebar(ctx: AppContext = Depends(get_context)):
    ctx.ui.toggle_sidebar()
    return UIResponse.from_store(ctx.ui)


@router.put("/ui/sidebar", response_model=UIResponse)
async def set_sidebar(req: SidebarRequest, ctx: AppContext = Depends(get_context)):
    ctx.ui.set_sidebar_open(req.open)
    return UIResponse.from_store(ctx.ui)
