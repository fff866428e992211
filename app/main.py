# app/main.py
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from app.api.v1.router import api_router
from app.api.v1 import internal
from app.config import get_settings
from app.database import init_db
from app.exceptions import (
    ConversationError,
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotAuthorizedError,
    NotFoundError,
)

# Get settings
settings = get_settings()

# Setup logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create tables in the database
init_db()

# Initialize app
app = FastAPI(
    title="Conversation Service API",
    description="Conversations between participants, context-scoped threads and unread activity",
    version="0.1.0"
)

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix=settings.API_PREFIX)
app.include_router(internal.router, prefix="/internal", tags=["internal"])

ERROR_STATUS = {
    NotAuthorizedError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
}


@app.get("/")
async def root():
    """Health check and welcome message"""
    return {
        "message": "Welcome to the Conversation Service API",
        "status": "ok",
        "version": "0.1.0"
    }


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.exception_handler(ConversationError)
async def conversation_error_handler(request: Request, exc: ConversationError):
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, NotAuthorizedError) else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind},
        headers=headers,
    )


# Error handler for global exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception on {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "detail": str(exc)}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
