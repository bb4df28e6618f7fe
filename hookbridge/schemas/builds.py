import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_validator

from hookbridge.models import BuildStatus


class BuildResponse(BaseModel):
    id: str
    job_name: str
    status: BuildStatus
    revision: str
    remote_url: str | None = None
    cause: dict[str, Any]
    status_update: dict[str, Any] | None = None
    webhook_event_id: uuid.UUID | None = None
    log_url: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None


class BuildCallback(BaseModel):
    status: str
    log_url: str | None = None

    @field_validator("status")
    @classmethod
    def status_must_be_valid(cls, v):
        if v not in ["success", "failure", "cancelled"]:
            raise ValueError("status must be 'success', 'failure', or 'cancelled'")
        return v
