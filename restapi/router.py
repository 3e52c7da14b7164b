"""Application configuration and router setup."""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

import fastapi
from fastapi import Request
from fastapi.middleware import cors
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from components.api.client import TripPlannerApi
from components.core.config import get_settings
from components.core.exceptions import (
    AuthenticationError,
    ConflictOrServerError,
    ConnectivityError,
    PermissionDeniedError,
    SessionStateError,
    TripPlannerError,
    UnknownRoleError,
    ValidationError,
)
from components.planner.service import TripPlanner
from restapi.endpoints import (
    allocation,
    auth,
    dashboard,
    health_check,
    holiday,
    plan,
    settings as settings_endpoints,
    user,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (ConnectivityError, 503),
    (AuthenticationError, 401),
    (ValidationError, 422),
    (PermissionDeniedError, 403),
    (ConflictOrServerError, 409),
    (SessionStateError, 409),
    (UnknownRoleError, 500),
)


def _status_for(exc: TripPlannerError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


def create_app(planner_factory: Optional[Callable[[], TripPlanner]] = None) -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    planner_factory = planner_factory or (lambda: TripPlanner(TripPlannerApi()))

    @asynccontextmanager
    async def lifespan(app: fastapi.FastAPI):
        # a fresh process always starts without a session
        planner = planner_factory()
        app.state.planner = planner
        try:
            await planner.load_initial_data()
        except TripPlannerError as exc:
            logger.error("Initial load failed, retrying on first request: %s", exc.message)
        yield
        await planner.api.close()

    app = fastapi.FastAPI(
        title=settings.SERVICE_NAME,
        description="Trip planning and booking allocation service",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TripPlannerError)
    async def trip_planner_error_handler(request: Request, exc: TripPlannerError):
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status_code, content={"detail": exc.message})

    # Include routers
    app.include_router(health_check.router)
    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(plan.router)
    app.include_router(allocation.router)
    app.include_router(holiday.router)
    app.include_router(settings_endpoints.router)
    app.include_router(user.router)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title=settings.SERVICE_NAME,
            version="1.0.0",
            description="Trip planning and booking allocation service",
            routes=app.routes,
        )
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app
