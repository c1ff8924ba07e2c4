import sqlalchemy as sa
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


GLOBAL_HUB_NAME = "BuildClub Global"


class Hub(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "hubs"
    __table_args__ = (
        sa.Index(
            "uq_hubs_global_name",
            "name",
            unique=True,
            postgresql_where=sa.text(f"name = '{GLOBAL_HUB_NAME}'"),
            sqlite_where=sa.text(f"name = '{GLOBAL_HUB_NAME}'"),
        ),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    country: Mapped[str] = mapped_column(String(120), nullable=False)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    latitude: Mapped[str | None] = mapped_column(String(32), nullable=True)
    longitude: Mapped[str | None] = mapped_column(String(32), nullable=True)
