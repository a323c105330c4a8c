# weekmenu/api/routes.py
from __future__ import annotations

import logging
from typing import Any, Optional

import anyio
from fastapi import APIRouter, Depends, HTTPException, Request

from weekmenu.api.schemas import (
    MenuWeekResponse,
    ShoppingListRequest,
    ShoppingListResponse,
    SlotRequest,
)

log = logging.getLogger("api.routes")
router = APIRouter()


# -------------------------
# Dependencies via app.state
# -------------------------
def get_menu_planner(request: Request):
    planner = getattr(request.app.state, "menu_planner", None)
    if planner is None:
        raise RuntimeError("menu_planner not initialized. Check app startup wiring.")
    return planner


def get_shopping_list_builder(request: Request):
    builder = getattr(request.app.state, "shopping_list_builder", None)
    if builder is None:
        raise RuntimeError("shopping_list_builder not initialized. Check app startup wiring.")
    return builder


@router.get("/healthz")
def healthz() -> Any:
    return {"status": "ok"}


# -------------------------
# /menu
# -------------------------
@router.post("/menu/generate", response_model=MenuWeekResponse)
async def generate_menu(planner=Depends(get_menu_planner)) -> Any:
    try:
        # scoring and the store round-trips are blocking; keep the event loop free
        return await anyio.to_thread.run_sync(lambda: planner.describe_week(planner.generate_and_save()))
    except Exception as e:
        log.exception("Processing /menu/generate error")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/menu", response_model=MenuWeekResponse)
def current_menu(planner=Depends(get_menu_planner)) -> Any:
    week = planner.current_week()
    if week is None:
        raise HTTPException(status_code=404, detail="No menu generated yet")
    return planner.describe_week(week)


def _slot_action(planner, slot_id: str, action: str) -> Any:
    if not slot_id.strip():
        raise HTTPException(status_code=400, detail="slot_id is required")
    try:
        week = planner.swap_slot(slot_id) if action == "swap" else planner.remove_slot(slot_id)
        return planner.describe_week(week)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("Processing /menu/%s error", action)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/menu/swap", response_model=MenuWeekResponse)
def swap_slot(req: SlotRequest, planner=Depends(get_menu_planner)) -> Any:
    return _slot_action(planner, req.slot_id, "swap")


@router.post("/menu/remove", response_model=MenuWeekResponse)
def remove_slot(req: SlotRequest, planner=Depends(get_menu_planner)) -> Any:
    return _slot_action(planner, req.slot_id, "remove")


# -------------------------
# /shopping-list
# -------------------------
@router.get("/shopping-list", response_model=ShoppingListResponse)
def week_shopping_list(week_id: Optional[str] = None, builder=Depends(get_shopping_list_builder)) -> Any:
    try:
        week, items = builder.for_week(week_id)
        return {"week_id": week.id, "items": [it.to_dict() for it in items]}
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        log.exception("Processing /shopping-list error")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/shopping-list", response_model=ShoppingListResponse)
def recipes_shopping_list(req: ShoppingListRequest, builder=Depends(get_shopping_list_builder)) -> Any:
    try:
        items = builder.for_recipes(req.recipe_urls)
        return {"week_id": None, "items": [it.to_dict() for it in items]}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("Processing POST /shopping-list error")
        raise HTTPException(status_code=500, detail=str(e))
