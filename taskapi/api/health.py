from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from taskapi.api.schemas import HealthzResponse, ReadinessChecks, ReadyzResponse
from taskapi.core.config import get_settings
from taskapi.core.logging import get_logger
from taskapi.db.engine import check_database_connection

router = APIRouter(tags=["health"])
logger = get_logger("taskapi.api.health")


@router.get("/healthz", response_model=HealthzResponse)
def healthz() -> HealthzResponse:
    settings = get_settings()
    return HealthzResponse(status="ok", service=settings.app_name, env=settings.app_env)


@router.get(
    "/readyz",
    response_model=ReadyzResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ReadyzResponse}},
)
def readyz() -> ReadyzResponse | JSONResponse:
    _ = get_settings()
    try:
        check_database_connection()
    except SQLAlchemyError:
        logger.warning("readiness.database_unavailable", exc_info=True)
        payload = ReadyzResponse(
            status="unavailable",
            checks=ReadinessChecks(configuration="ok", database="error"),
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=payload.model_dump(mode="json"),
        )
    return ReadyzResponse(status="ready", checks=ReadinessChecks(configuration="ok", database="ok"))
