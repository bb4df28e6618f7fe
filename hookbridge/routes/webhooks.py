import hmac
import uuid

import structlog
from fastapi import APIRouter, Header, HTTPException, Request, status
from pydantic import ValidationError

from hookbridge.config import settings
from hookbridge.database import get_db
from hookbridge.models.webhook_event import WebhookEvent, WebhookSource
from hookbridge.schemas.hooks import NoteHook
from hookbridge.services import trigger_service

logger = structlog.get_logger(__name__)

webhooks_router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

NOTE_HOOK_EVENT = "Note Hook"


def verify_webhook_token(token: str | None) -> None:
    if not settings.gitee_webhook_secret:
        return

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Gitee-Token header.",
        )

    if not hmac.compare_digest(settings.gitee_webhook_secret, token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token.",
        )


@webhooks_router.post(
    "/gitee/{job_name}",
    status_code=status.HTTP_202_ACCEPTED,
)
async def receive_gitee_webhook(
    job_name: str,
    request: Request,
    x_gitee_token: str | None = Header(None, description="Gitee webhook password"),
    x_gitee_event: str | None = Header(None, description="Gitee event type"),
):
    verify_webhook_token(x_gitee_token)

    if x_gitee_event != NOTE_HOOK_EVENT:
        logger.info(
            "Ignoring unsupported Gitee event", event=x_gitee_event, job_name=job_name
        )
        return {"message": "Webhook received but ignored due to event type."}

    try:
        payload = await request.json()
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload."
        )

    try:
        hook = NoteHook.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail=f"Invalid note hook payload: {e.error_count()} validation errors",
        )

    event = WebhookEvent(
        id=uuid.uuid4(),
        source=WebhookSource.GITEE,
        event_type=NOTE_HOOK_EVENT,
        payload=payload,
        repository=hook.project.path_with_namespace or hook.project.name or "",
        actor=hook.comment.user.username or "",
    )

    try:
        async with get_db() as db:
            db.add(event)

        result = await trigger_service.handle_note_hook(
            job_name, hook, webhook_event_id=event.id
        )

        async with get_db() as db:
            stored = await db.get(WebhookEvent, event.id)
            if stored:
                stored.processed = True
    except Exception as e:
        logger.error(
            "Error processing note hook",
            error=str(e),
            job_name=job_name,
            event_id=str(event.id),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error occurred while processing webhook: {e}",
        )

    response = {
        "message": "Webhook received",
        "event_id": str(event.id),
        "outcome": result.outcome.value,
    }
    if result.build_id:
        response["build_id"] = result.build_id

    return response
