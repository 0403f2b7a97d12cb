"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from meal_planner.api.plans import router as plans_router
from meal_planner.app_logging import configure_logging
from meal_planner.containers import AppContainer
from meal_planner.domain.errors import MealPlanError

_STATUS_BY_CODE = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DUPLICATE_NAME": status.HTTP_409_CONFLICT,
    "NOT_A_TEMPLATE": status.HTTP_409_CONFLICT,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(plans_router)

    @app.exception_handler(MealPlanError)
    async def meal_plan_error_handler(
        request: Request, exc: MealPlanError
    ) -> JSONResponse:
        status_code = error_status(exc)
        logger.info(
            "Request failed: path=%s code=%s", request.url.path, exc.code
        )
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def error_status(exc: MealPlanError) -> int:
    """Map an error code onto an HTTP status."""
    return _STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
