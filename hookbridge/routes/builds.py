import hmac
import uuid
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hookbridge.database import get_db
from hookbridge.models import Build
from hookbridge.schemas.builds import BuildCallback, BuildResponse
from hookbridge.services import trigger_service

logger = structlog.get_logger(__name__)
builds_router = APIRouter(prefix="/api", tags=["builds"])
security = HTTPBearer()


def build_to_response(build: Build) -> BuildResponse:
    return BuildResponse(
        id=str(build.id),
        job_name=build.job_name,
        status=build.status,
        revision=build.revision,
        remote_url=build.remote_url,
        cause=build.cause or {},
        status_update=build.status_update,
        webhook_event_id=build.webhook_event_id,
        log_url=build.log_url,
        created_at=build.created_at,
        started_at=build.started_at,
        finished_at=build.finished_at,
    )


@builds_router.get(
    "/builds/{build_id}",
    response_model=BuildResponse,
    status_code=status.HTTP_200_OK,
)
async def get_build(build_id: uuid.UUID):
    async with get_db() as db:
        build = await db.get(Build, build_id)
        if not build:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Build {build_id} not found",
            )

        return build_to_response(build)


@builds_router.post(
    "/builds/{build_id}/callback",
    status_code=status.HTTP_200_OK,
)
async def build_callback(
    build_id: uuid.UUID,
    data: BuildCallback,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict[str, Any]:
    async with get_db() as db:
        build = await db.get(Build, build_id)
        if not build:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Build {build_id} not found",
            )
        callback_token = build.callback_token

    if not hmac.compare_digest(callback_token, credentials.credentials):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid callback token",
        )

    try:
        build = await trigger_service.handle_callback(build_id, data)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {
        "status": "ok",
        "build_id": str(build.id),
        "build_status": build.status.value,
    }
