"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from cv_blueprint.config import MergeSettings
from cv_blueprint.storage.base import BlueprintStore

from .blueprint import router as blueprint_router


def create_app(
    store: Optional[BlueprintStore] = None,
    settings: Optional[MergeSettings] = None,
    database_url: Optional[str] = None,
) -> FastAPI:
    """Build the app; without an explicit store, blueprints live in the SQL database."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is None:
            from cv_blueprint.models import Base, configure_database, get_engine
            if database_url:
                configure_database(database_url)
            else:
                Base.metadata.create_all(get_engine())
        yield

    app = FastAPI(title="CV Blueprint", lifespan=lifespan)

    if store is None:
        from cv_blueprint.storage.database import SqlBlueprintStore
        app.state.store = SqlBlueprintStore()
    else:
        app.state.store = store
    app.state.merge_settings = settings or MergeSettings()

    app.include_router(blueprint_router)

    return app
