"""
API Router

Aggregates the endpoint routers mounted under the API prefix.
"""

from fastapi import APIRouter

from healthtracker.api.endpoints.admin import router as admin_router
from healthtracker.api.endpoints.chat import router as chat_router
from healthtracker.api.endpoints.notifications import router as notifications_router
from healthtracker.api.endpoints.nutrition import router as nutrition_router
from healthtracker.api.endpoints.pwa import router as pwa_router
from healthtracker.api.endpoints.tickets import admin_router as admin_tickets_router
from healthtracker.api.endpoints.tickets import router as tickets_router

api_router = APIRouter()

api_router.include_router(chat_router, tags=["Chat"])
api_router.include_router(nutrition_router, tags=["Nutrition"])

api_router.include_router(
    admin_router,
    prefix="/admin",
    tags=["Admin"],
)

api_router.include_router(
    admin_tickets_router,
    prefix="/admin/tickets",
    tags=["Admin", "Tickets"],
)

api_router.include_router(
    tickets_router,
    prefix="/tickets",
    tags=["Tickets"],
)

api_router.include_router(
    notifications_router,
    prefix="/notifications",
    tags=["Notifications"],
)

api_router.include_router(
    pwa_router,
    prefix="/pwa",
    tags=["PWA"],
)
