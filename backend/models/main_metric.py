"""Main metric model: per-location estimation history."""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models import Base


class MainMetric(Base):
    """Main metrics table: id, location_id, date, estimated_people, device_count."""

    __tablename__ = "main_metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location_id: Mapped[str] = mapped_column(String(64), ForeignKey("location.id"), nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    estimated_people: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    device_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
