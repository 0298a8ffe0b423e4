# storefront/api/__init__.py
from fastapi import FastAPI

from storefront.api.routers import categories, health, orders, products


def include_routers(app: FastAPI) -> FastAPI:
    app.include_router(health.router)
    app.include_router(categories.router)
    app.include_router(products.router)
    app.include_router(orders.router)
    return app
