from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.service.ticketing.app.dto.booking_result import BookingResult, TicketView
from src.service.ticketing.app.dto.showtime_availability import ShowtimeAvailability
from src.service.ticketing.domain.entity.booking_entity import Booking
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.entity.seat_claim_entity import SeatClaim
from src.service.ticketing.domain.entity.ticket_entity import Ticket


class BookTicketRequest(BaseModel):
    showtime_id: int
    seat_number: str
    row: str

    model_config = ConfigDict(
        json_schema_extra={'example': {'showtime_id': 1, 'seat_number': '12', 'row': 'A'}}
    )


class SeatHoldRequest(BaseModel):
    showtime_id: int
    seat_number: str
    row: str
    ttl_seconds: Optional[int] = Field(default=None, gt=0, le=3600)

    model_config = ConfigDict(
        json_schema_extra={
            'example': {'showtime_id': 1, 'seat_number': '12', 'row': 'A', 'ttl_seconds': 300}
        }
    )


class SeatReleaseRequest(BaseModel):
    showtime_id: int
    seat_number: str
    row: str


class TicketResponse(BaseModel):
    id: UUID
    showtime_id: int
    customer_id: int
    row: str
    seat_number: str
    price: Decimal
    status: str
    purchase_date: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: Ticket) -> 'TicketResponse':
        return cls(
            id=ticket.id,
            showtime_id=ticket.showtime_id,
            customer_id=ticket.customer_id,
            row=ticket.row,
            seat_number=ticket.seat_number,
            price=ticket.price,
            status=ticket.status.value,
            purchase_date=ticket.purchase_date,
        )


class PaymentResponse(BaseModel):
    id: UUID
    ticket_id: UUID
    amount: Decimal
    method: str
    status: str
    payment_date: Optional[datetime] = None

    @classmethod
    def from_entity(cls, payment: Payment) -> 'PaymentResponse':
        return cls(
            id=payment.id,
            ticket_id=payment.ticket_id,
            amount=payment.amount,
            method=payment.method.value,
            status=payment.status.value,
            payment_date=payment.payment_date,
        )


class BookingRecordResponse(BaseModel):
    id: UUID
    customer_id: int
    showtime_id: int
    ticket_id: UUID
    payment_id: UUID
    seats: List[str]
    total_amount: Decimal
    status: str
    payment_status: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, booking: Booking) -> 'BookingRecordResponse':
        return cls(
            id=booking.id,
            customer_id=booking.customer_id,
            showtime_id=booking.showtime_id,
            ticket_id=booking.ticket_id,
            payment_id=booking.payment_id,
            seats=list(booking.seats),
            total_amount=booking.total_amount,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            created_at=booking.created_at,
        )


class BookTicketResponse(BaseModel):
    ticket: TicketResponse
    payment: PaymentResponse
    booking: BookingRecordResponse

    @classmethod
    def from_result(cls, result: BookingResult) -> 'BookTicketResponse':
        return cls(
            ticket=TicketResponse.from_entity(result.ticket),
            payment=PaymentResponse.from_entity(result.payment),
            booking=BookingRecordResponse.from_entity(result.booking),
        )


class CancelBookingResponse(BaseModel):
    success: bool
    message: str
    ticket_id: UUID


class TicketViewResponse(BaseModel):
    id: UUID
    showtime_id: int
    movie_id: Optional[int] = None
    theater_id: Optional[int] = None
    showtime_start: Optional[datetime] = None
    showtime_end: Optional[datetime] = None
    row: str
    seat_number: str
    price: Decimal
    status: str
    purchase_date: Optional[datetime] = None
    payment_status: Optional[str] = None

    @classmethod
    def from_view(cls, view: TicketView) -> 'TicketViewResponse':
        return cls(
            id=view.ticket.id,
            showtime_id=view.ticket.showtime_id,
            movie_id=view.movie_id,
            theater_id=view.theater_id,
            showtime_start=view.showtime_start,
            showtime_end=view.showtime_end,
            row=view.ticket.row,
            seat_number=view.ticket.seat_number,
            price=view.ticket.price,
            status=view.ticket.status.value,
            purchase_date=view.ticket.purchase_date,
            payment_status=view.payment_status.value if view.payment_status else None,
        )


class SeatHoldResponse(BaseModel):
    showtime_id: int
    row: str
    seat_number: str
    status: str
    locked_by: Optional[int] = None
    lock_expires_at: Optional[datetime] = None
    version: int

    @classmethod
    def from_entity(cls, claim: SeatClaim) -> 'SeatHoldResponse':
        return cls(
            showtime_id=claim.showtime_id,
            row=claim.row,
            seat_number=claim.seat_number,
            status=claim.status.value,
            locked_by=claim.locked_by,
            lock_expires_at=claim.lock_expires_at,
            version=claim.version,
        )


class SeatReleaseResponse(BaseModel):
    released: bool


class SeatStatusResponse(BaseModel):
    row: str
    seat_number: str
    status: str
    version: int


class ShowtimeAvailabilityResponse(BaseModel):
    showtime_id: int
    capacity: int
    available_seats: int
    booked_seats: int
    is_consistent: bool
    seats: List[SeatStatusResponse]

    @classmethod
    def from_dto(cls, availability: ShowtimeAvailability) -> 'ShowtimeAvailabilityResponse':
        return cls(
            showtime_id=availability.showtime_id,
            capacity=availability.capacity,
            available_seats=availability.available_seats,
            booked_seats=availability.booked_seats,
            is_consistent=availability.is_consistent,
            seats=[
                SeatStatusResponse(
                    row=seat.row,
                    seat_number=seat.seat_number,
                    status=seat.status.value,
                    version=seat.version,
                )
                for seat in availability.seats
            ],
        )
