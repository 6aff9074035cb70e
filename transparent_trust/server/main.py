"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware
(CORS, request timing), registers the error envelope handlers and includes
all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from transparent_trust import __version__
from transparent_trust.core.database import init_db
from transparent_trust.core.logging_config import get_logger, setup_logging
from transparent_trust.core.monitoring import initialize_logfire

from .api.v1 import (
    audit_log,
    auth_groups,
    collateral,
    customers,
    health,
    instruction_presets,
    projects,
    reviews,
    skills,
    templates,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables on startup. A database that cannot be reached
    is logged and the server still starts, so ``/health`` can report it.
    """
    try:
        logger.info("Starting up Transparent Trust Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down Transparent Trust Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Transparent Trust Server API

    Backend for sales and RFP enablement: customer profiles, knowledge skills,
    document templates and collateral, bulk RFP projects and their review workflow.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)

app.include_router(health.router, prefix=constant.API_V1_STR, tags=["health"])
app.include_router(templates.router, prefix=f"{constant.API_V1_STR}/templates")
app.include_router(customers.router, prefix=f"{constant.API_V1_STR}/customers")
app.include_router(instruction_presets.router, prefix=f"{constant.API_V1_STR}/instruction-presets")
app.include_router(collateral.router, prefix=f"{constant.API_V1_STR}/collateral")
app.include_router(auth_groups.router, prefix=f"{constant.API_V1_STR}/auth-groups")
app.include_router(audit_log.router, prefix=f"{constant.API_V1_STR}/audit-log")
app.include_router(skills.router, prefix=f"{constant.API_V1_STR}/skills")
app.include_router(projects.router, prefix=f"{constant.API_V1_STR}/projects")
app.include_router(reviews.router, prefix=f"{constant.API_V1_STR}/reviews")
