# storefront/api/__init__.py
from fastapi import FastAPI
from storefront.api.routers import cart, contact, health, orders, users


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Orders Service",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(cart.router)
    app.include_router(orders.router)
    app.include_router(contact.router)

    return app
