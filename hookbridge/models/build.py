import secrets
import uuid
from datetime import datetime
from enum import Enum
from typing import Any

import sqlalchemy
from sqlalchemy import JSON, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hookbridge.models.webhook_event import Base


class BuildStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


ACTIVE_BUILD_STATUSES = (BuildStatus.PENDING, BuildStatus.RUNNING)


class Build(Base):
    __tablename__ = "build"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, index=True
    )
    job_name: Mapped[str] = mapped_column(String(255), index=True)
    status: Mapped[BuildStatus] = mapped_column(
        index=True,
        default=BuildStatus.PENDING,
        type_=sqlalchemy.Enum(
            BuildStatus, values_callable=lambda x: [e.value for e in x]
        ),
    )

    revision: Mapped[str] = mapped_column(String(255), index=True)
    remote_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    remote_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    cause: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    status_update: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=func.now(), index=True)
    started_at: Mapped[datetime | None] = mapped_column(nullable=True)
    finished_at: Mapped[datetime | None] = mapped_column(nullable=True)

    webhook_event_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("webhookevent.id"), nullable=True, index=True
    )
    webhook_event = relationship("WebhookEvent", backref="builds")

    log_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    callback_token: Mapped[str] = mapped_column(
        String(32), default=lambda: secrets.token_hex(16)
    )

    def __repr__(self):
        return f"<Build(id={self.id}, status='{self.status.name}', job_name='{self.job_name}')>"
