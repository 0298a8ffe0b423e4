# storefront/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from storefront.api import include_routers
from storefront.data.database import Base, engine
from storefront.utils.logging import get_logger

# IMPORT WSZYSTKICH MODELI PRZED CREATE_ALL
import storefront.data.models  # noqa: F401

logger = get_logger(__name__)


def init_db(bind=None):
    bind = bind or engine
    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=bind)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="Storefront Service",
        version="1.0.0",
        lifespan=lifespan if with_lifespan else None,
    )

    # Include routers
    include_routers(app)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
