"""Location parameters model: one row per location."""
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models import Base


class LocationParameters(Base):
    """Usage estimation parameters for a location. location_id is both PK and FK, so at most one row exists."""

    __tablename__ = "location_parameters"

    location_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("location.id"),
        primary_key=True,
    )
    avg_devices_per_person: Mapped[float] = mapped_column(Float, nullable=False)
    avg_sims_per_person: Mapped[float] = mapped_column(Float, nullable=False)
    wifi_usage_ratio: Mapped[float] = mapped_column(Float, nullable=False)
    cellular_usage_ratio: Mapped[float] = mapped_column(Float, nullable=False)
    # Seconds between estimation refreshes.
    update_interval: Mapped[int] = mapped_column(Integer, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(),
        nullable=False,
        server_default=func.current_timestamp(),
    )
