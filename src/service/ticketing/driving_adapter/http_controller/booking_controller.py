from datetime import timedelta
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.book_ticket_use_case import BookTicketUseCase
from src.service.ticketing.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.ticketing.app.command.hold_seat_use_case import (
    HoldSeatUseCase,
    ReleaseSeatHoldUseCase,
)
from src.service.ticketing.app.query.get_booking_history_use_case import (
    GetBookingHistoryUseCase,
)
from src.service.ticketing.app.query.get_showtime_availability_use_case import (
    GetShowtimeAvailabilityUseCase,
)
from src.service.ticketing.app.query.list_user_tickets_use_case import ListUserTicketsUseCase
from src.service.ticketing.driving_adapter.http_controller.auth.current_customer import (
    get_current_customer_id,
)
from src.service.ticketing.driving_adapter.http_controller.schema.booking_schema import (
    BookingRecordResponse,
    BookTicketRequest,
    BookTicketResponse,
    CancelBookingResponse,
    SeatHoldRequest,
    SeatHoldResponse,
    SeatReleaseRequest,
    SeatReleaseResponse,
    ShowtimeAvailabilityResponse,
    TicketViewResponse,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def book_ticket(
    request: BookTicketRequest,
    customer_id: Optional[int] = Depends(get_current_customer_id),
    use_case: BookTicketUseCase = Depends(BookTicketUseCase.depends),
) -> BookTicketResponse:
    result = await use_case.execute(
        customer_id=customer_id,
        showtime_id=request.showtime_id,
        seat_number=request.seat_number,
        row=request.row,
    )
    return BookTicketResponse.from_result(result)


@router.get('/tickets')
@Logger.io
async def list_my_tickets(
    customer_id: Optional[int] = Depends(get_current_customer_id),
    use_case: ListUserTicketsUseCase = Depends(ListUserTicketsUseCase.depends),
) -> List[TicketViewResponse]:
    views = await use_case.execute(customer_id=customer_id)
    return [TicketViewResponse.from_view(view) for view in views]


@router.get('/history')
@Logger.io
async def get_booking_history(
    customer_id: Optional[int] = Depends(get_current_customer_id),
    use_case: GetBookingHistoryUseCase = Depends(GetBookingHistoryUseCase.depends),
) -> List[BookingRecordResponse]:
    bookings = await use_case.execute(customer_id=customer_id)
    return [BookingRecordResponse.from_entity(booking) for booking in bookings]


@router.get('/showtime/{showtime_id}/availability')
@Logger.io
async def get_showtime_availability(
    showtime_id: int,
    use_case: GetShowtimeAvailabilityUseCase = Depends(GetShowtimeAvailabilityUseCase.depends),
) -> ShowtimeAvailabilityResponse:
    availability = await use_case.execute(showtime_id=showtime_id)
    return ShowtimeAvailabilityResponse.from_dto(availability)


@router.post('/hold', status_code=status.HTTP_201_CREATED)
@Logger.io
async def hold_seat(
    request: SeatHoldRequest,
    customer_id: Optional[int] = Depends(get_current_customer_id),
    use_case: HoldSeatUseCase = Depends(HoldSeatUseCase.depends),
) -> SeatHoldResponse:
    claim = await use_case.execute(
        customer_id=customer_id,
        showtime_id=request.showtime_id,
        seat_number=request.seat_number,
        row=request.row,
        ttl=timedelta(seconds=request.ttl_seconds) if request.ttl_seconds else None,
    )
    return SeatHoldResponse.from_entity(claim)


@router.delete('/hold')
@Logger.io
async def release_seat_hold(
    request: SeatReleaseRequest,
    customer_id: Optional[int] = Depends(get_current_customer_id),
    use_case: ReleaseSeatHoldUseCase = Depends(ReleaseSeatHoldUseCase.depends),
) -> SeatReleaseResponse:
    released = await use_case.execute(
        customer_id=customer_id,
        showtime_id=request.showtime_id,
        seat_number=request.seat_number,
        row=request.row,
    )
    return SeatReleaseResponse(released=released)


@router.delete('/{ticket_id}')
@Logger.io
async def cancel_booking(
    ticket_id: UUID,
    customer_id: Optional[int] = Depends(get_current_customer_id),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> CancelBookingResponse:
    ticket = await use_case.execute(customer_id=customer_id, ticket_id=ticket_id)
    return CancelBookingResponse(
        success=True, message='Booking cancelled and payment refunded', ticket_id=ticket.id
    )
