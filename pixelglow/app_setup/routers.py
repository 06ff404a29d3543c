"""
Registre central des routers (API v1 checkout, health).
"""
from fastapi import FastAPI

from pixelglow.health.router import router as health_router
from pixelglow.orders.views import orders_router, paypal_router
from pixelglow.pricing.views import router as pricing_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(pricing_router)
    app.include_router(paypal_router)
    app.include_router(orders_router)
    # Health & monitoring
    app.include_router(health_router)
