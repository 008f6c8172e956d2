"""Active device model. Written by the device tracking side; read here only for cleanup."""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models import Base


class ActiveDevice(Base):
    """Active devices table: id, location_id, device_hash, first_seen."""

    __tablename__ = "active_devices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # No ON DELETE CASCADE: rows must be purged before their location is deleted.
    location_id: Mapped[str] = mapped_column(String(64), ForeignKey("location.id"), nullable=False, index=True)
    device_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    first_seen: Mapped[datetime] = mapped_column(
        DateTime(),
        nullable=False,
        server_default=func.current_timestamp(),
    )
