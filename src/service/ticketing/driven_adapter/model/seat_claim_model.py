from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class SeatClaimModel(Base):
    __tablename__ = 'seat_claim'
    __table_args__ = (
        UniqueConstraint('showtime_id', 'seat_row', 'seat_number', name='uq_seat_claim_seat'),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    showtime_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('showtime.id'), nullable=False, index=True
    )
    seat_row: Mapped[str] = mapped_column(String(10), nullable=False)
    seat_number: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    owner_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    locked_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    lock_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
