from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class TicketModel(Base):
    __tablename__ = 'ticket'
    __table_args__ = (Index('ix_ticket_showtime_seat', 'showtime_id', 'seat_row', 'seat_number'),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    showtime_id: Mapped[int] = mapped_column(Integer, ForeignKey('showtime.id'), nullable=False)
    customer_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    seat_claim_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('seat_claim.id'), nullable=False
    )
    seat_row: Mapped[str] = mapped_column(String(10), nullable=False)
    seat_number: Mapped[str] = mapped_column(String(10), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    purchase_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
