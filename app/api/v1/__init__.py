# app/api/v1/__init__.py
"""
Versioned API v1: aggregates all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from app.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from app.api.v1.routes.auth import router as auth_router
from app.api.v1.routes.bills import router as bills_router
from app.api.v1.routes.orders import router as orders_router
from app.api.v1.routes.coupons import router as coupons_router
from app.api.v1.routes.menu import router as menu_router

from app.api.v1.routes.admin_billing import router as admin_billing_router
from app.api.v1.routes.admin_coupons import router as admin_coupons_router
from app.api.v1.routes.admin_analytics import router as admin_analytics_router
from app.api.v1.routes.admin_customers import router as admin_customers_router
from app.api.v1.routes.admin_menu import router as admin_menu_router

v1_router = APIRouter(prefix="/api/v1")

# Customer APIs
v1_router.include_router(auth_router)
v1_router.include_router(bills_router)
v1_router.include_router(orders_router)
v1_router.include_router(coupons_router)
v1_router.include_router(menu_router)

# Admin APIs (X-Admin-Token / admin_session cookie)
v1_router.include_router(admin_billing_router)
v1_router.include_router(admin_coupons_router)
v1_router.include_router(admin_analytics_router)
v1_router.include_router(admin_customers_router)
v1_router.include_router(admin_menu_router)

__all__ = ["v1_router"]
