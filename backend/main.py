# backend/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from config import Settings, settings as default_settings
from database import Store, open_store

# Routers
from routes.categories import router as categories_router
from routes.products import router as products_router
from routes.tags import router as tags_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    """Build the API. A ready store can be passed in; otherwise one is opened on startup."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        own_store = store is None
        app.state.store = store or open_store(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        app.state.store.create_all()
        logger.info("Store ready at %s", app.state.store.engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            if own_store:
                app.state.store.close()
                logger.info("Store closed")

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.settings = settings
    if store is not None:
        app.state.store = store

    # CORS Configuration
    origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
    if settings.FRONTEND_URL:
        origins.append(settings.FRONTEND_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(categories_router)
    app.include_router(products_router)
    app.include_router(tags_router)

    @app.get("/")
    def read_root():
        return {"message": f"{settings.APP_NAME} is running"}

    return app


configure_logging(default_settings.LOG_LEVEL)
app = create_app()
