# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1 import conversations, messages, activity

# Create the main router
api_router = APIRouter()

# Include all the sub-routers
api_router.include_router(conversations.router, prefix="/conversations", tags=["conversations"])
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
api_router.include_router(activity.router, prefix="/activity", tags=["activity"])
