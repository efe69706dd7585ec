"""
Customer Address Backend API Server
Customers and their addresses over PostgreSQL
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS, API_PREFIX, LOG_LEVEL
from database.connection import init_database, close_database
from api.routes import health, customers, addresses
from utils.error_handling import setup_error_handling

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    await init_database()
    yield
    await close_database()

def create_app(use_lifespan: bool = True) -> FastAPI:
    """Build the FastAPI application; tests pass use_lifespan=False and install their own pool"""
    app = FastAPI(
        title="Customer Address Backend",
        description="Backend API for managing customers and their addresses",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials="*" not in ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Setup centralized error handling
    setup_error_handling(app)

    # Include API routes
    app.include_router(health.router, tags=["Health"])
    app.include_router(customers.router, prefix=f"{API_PREFIX}/customers", tags=["Customers"])
    app.include_router(addresses.router, prefix=f"{API_PREFIX}/addresses", tags=["Addresses"])

    return app

# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
app = create_app()
