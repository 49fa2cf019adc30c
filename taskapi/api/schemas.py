from typing import Literal

from pydantic import BaseModel

CheckStatus = Literal["ok", "error"]


class HealthzResponse(BaseModel):
    status: str
    service: str
    env: str


class ReadinessChecks(BaseModel):
    configuration: CheckStatus
    database: CheckStatus


class ReadyzResponse(BaseModel):
    status: Literal["ready", "unavailable"]
    checks: ReadinessChecks
