from hookbridge.routes.builds import builds_router
from hookbridge.routes.webhooks import webhooks_router

__all__ = [
    "builds_router",
    "webhooks_router",
]
