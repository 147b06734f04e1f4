# app/main.py
from fastapi import FastAPI
import uvicorn

from app.api.routers import carts, health, items, orders
from app.data.database import init_db
from app.utils.logging import get_logger

logger = get_logger(__name__)


def create_app() -> FastAPI:
    logger.info("Initializing database")
    init_db()

    app = FastAPI(
        title="Farm Shop Cart Service",
        version="1.0.0",
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(items.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
