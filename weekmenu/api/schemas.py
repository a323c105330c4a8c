# weekmenu/api/schemas.py
from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class RecipeSummary(BaseModel):
    url: str
    title: str
    image_url: str = ""
    prep_time: Optional[int] = None
    servings: int = 4
    source: str = ""
    is_favorite: bool = False
    tags: List[str] = Field(default_factory=list)


class MenuSlotOut(BaseModel):
    id: Optional[str] = None
    day_of_week: int = Field(ge=0, le=6)
    day_name: str
    reason: str = ""
    recipe: Optional[RecipeSummary] = None


class MenuWeekResponse(BaseModel):
    id: Optional[str] = None
    week_start: str
    created_at: str
    slots: List[MenuSlotOut]


class SlotRequest(BaseModel):
    slot_id: str = Field(..., description="Id of the menu slot")


class ShoppingItemOut(BaseModel):
    name: str
    display_name: str
    total_quantity: str
    unit: str
    category: str
    from_recipes: List[str]


class ShoppingListRequest(BaseModel):
    recipe_urls: List[str] = Field(default_factory=list)


class ShoppingListResponse(BaseModel):
    week_id: Optional[str] = None
    items: List[ShoppingItemOut]
