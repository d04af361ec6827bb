from fastapi import APIRouter

from app.api.routes import (
    auth,
    chat,
    drinks,
    notifications,
    payments,
    profiles,
    spots,
    suggestions,
)

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(profiles.router)
api_router.include_router(spots.router)
api_router.include_router(spots.invitations_router)
api_router.include_router(payments.router)
api_router.include_router(drinks.router)
api_router.include_router(suggestions.router)
api_router.include_router(notifications.router)
api_router.include_router(chat.router)
