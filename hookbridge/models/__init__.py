"""Models module."""

from hookbridge.models.webhook_event import WebhookEvent, WebhookSource, Base
from hookbridge.models.build import ACTIVE_BUILD_STATUSES, Build, BuildStatus

__all__ = [
    "WebhookEvent",
    "WebhookSource",
    "Base",
    "ACTIVE_BUILD_STATUSES",
    "Build",
    "BuildStatus",
]
