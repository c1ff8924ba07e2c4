import uuid

import sqlalchemy as sa
from sqlalchemy import Boolean, ForeignKey, Integer, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class HubEvent(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "hub_events"
    __table_args__ = (UniqueConstraint("hub_id", "event_id", name="uq_hub_events_hub_event"),)

    hub_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("hubs.id", ondelete="CASCADE"), nullable=False
    )
    event_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )

    is_primary: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
