from __future__ import annotations

import logging
import uvicorn
import numpy as np
from fastapi import FastAPI
from pymongo import MongoClient
from dotenv import load_dotenv
load_dotenv()
from weekmenu.api.routes import router
from weekmenu.core.config import (
    API_PORT, MENU_SEED, MONGO_BONUSES_COL, MONGO_DB, MONGO_MENUS_COL, MONGO_RECIPES_COL, MONGO_URI, MenuSettings,
)

from weekmenu.infrastructure.mongo_repositories import MongoBonusRepository, MongoMenuRepository, MongoRecipeRepository
from weekmenu.application.menu_planner import MenuPlanner
from weekmenu.application.shopping_list import ShoppingListBuilder

log = logging.getLogger("app")
app = FastAPI(title="Weekmenu")

_mongo_client: MongoClient | None = None


@app.on_event("startup")
def on_startup() -> None:
    global _mongo_client

    _mongo_client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=3000)
    db = _mongo_client[MONGO_DB]
    recipe_repo = MongoRecipeRepository(db[MONGO_RECIPES_COL])
    bonus_repo = MongoBonusRepository(db[MONGO_BONUSES_COL])
    menu_repo = MongoMenuRepository(db[MONGO_MENUS_COL])
    recipe_repo.ensure_indexes()
    menu_repo.ensure_indexes()

    # DI for routes.py
    app.state.menu_planner = MenuPlanner(
        recipe_repo=recipe_repo,
        bonus_repo=bonus_repo,
        menu_repo=menu_repo,
        settings=MenuSettings(),
        rng=np.random.default_rng(MENU_SEED),
    )
    app.state.shopping_list_builder = ShoppingListBuilder(recipe_repo=recipe_repo, menu_repo=menu_repo)

    log.info("Startup complete")


@app.on_event("shutdown")
def on_shutdown() -> None:
    global _mongo_client
    if _mongo_client:
        _mongo_client.close()


app.include_router(router)


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=API_PORT, reload=False)
