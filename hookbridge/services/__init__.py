from .publisher import MessagePublisher
from .status_reporter import StatusReporter
from .trigger import TriggerService

trigger_service = TriggerService()

__all__ = [
    "MessagePublisher",
    "StatusReporter",
    "trigger_service",
    "TriggerService",
]
