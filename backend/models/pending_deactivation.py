"""Pending deactivation model."""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models import Base


class PendingDeactivation(Base):
    """Pending deactivations table: devices scheduled to leave the active set."""

    __tablename__ = "pending_deactivations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location_id: Mapped[str] = mapped_column(String(64), ForeignKey("location.id"), nullable=False, index=True)
    device_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    deactivate_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
