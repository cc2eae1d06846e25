from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import settings
from config.db import init_db, close_db
from config.logging_config import setup_logging
from config.middleware import add_middleware
from apps.resources.routers import router as resources_router
from apps.user.routers import router as user_router

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    uses_db = settings.KV_BACKEND.lower() != 'rest'
    if uses_db:
        await init_db()
    yield
    if uses_db:
        await close_db()


def create_app() -> FastAPI:
    app = FastAPI(title="Resource Share", lifespan=lifespan)
    add_middleware(app)
    app.include_router(user_router, prefix=settings.API_PREFIX)
    app.include_router(resources_router, prefix=settings.API_PREFIX)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000)
