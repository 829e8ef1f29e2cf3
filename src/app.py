"""
Users Backend API Server
Core functionality: CRUD over the users table
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from config.settings import API_PREFIX
from database.connection import init_database, close_database
from api.routes import health, users
from middleware.response_headers import CORSHeadersMiddleware, JSONContentTypeMiddleware
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    await init_database()
    yield
    await close_database()

# FastAPI app initialization
app = FastAPI(
    title="Users Backend",
    description="Backend API for creating, listing, updating and deleting users",
    version="1.0.0",
    lifespan=lifespan
)

# Setup centralized error handling (request context middleware is innermost)
setup_error_handling(app)

# Response shaping; the last middleware added runs first, so CORS wraps everything
app.add_middleware(JSONContentTypeMiddleware)
app.add_middleware(CORSHeadersMiddleware)

# Include API routes
app.include_router(health.router, tags=["Health"])
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["Users"])

# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
