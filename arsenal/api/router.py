"""
API router that includes all endpoint routers.
"""
from fastapi import APIRouter
from arsenal.api.endpoints import (
    health,
    killboard,
    garage,
    uploads,
    customers
)

# Routes the storefront app proxy forwards under /apps
apps_router = APIRouter()
apps_router.include_router(killboard.router, tags=["Killboard"])
apps_router.include_router(garage.router, tags=["Garage"])
apps_router.include_router(uploads.router, tags=["Uploads"])
apps_router.include_router(customers.router, tags=["Customers"])

# Create main router
router = APIRouter()
router.include_router(health.router, tags=["Health"])
router.include_router(apps_router, prefix="/apps")
