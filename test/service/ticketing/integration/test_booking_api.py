"""
HTTP API over the in-memory backend

The DI container's store is swapped for the per-test store, so every
request runs the real use cases against seeded data.
"""

from decimal import Decimal
from typing import Dict, Iterator

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from src.platform.config.di import container
from src.service.ticketing.domain.entity.showtime_entity import Showtime
from src.service.ticketing.domain.enum.booking_status import BookingStatus
from src.service.ticketing.domain.enum.payment_enums import PaymentStatus
from src.service.ticketing.domain.enum.seat_claim_status import SeatClaimStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.driven_adapter.memory.in_memory_store import InMemoryStore
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from src.service.ticketing.main import app


BOOKING_URL = '/api/booking'


def auth_headers(customer_id: int) -> Dict[str, str]:
    token = JwtAuth().create_jwt_token(customer_id=customer_id, email=f'c{customer_id}@test.com')
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def client(store: InMemoryStore, showtime: Showtime) -> Iterator[TestClient]:
    container.in_memory_store.override(providers.Object(store))
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        container.in_memory_store.reset_override()


def book(client: TestClient, customer_id: int, showtime_id: int, seat: str = '1', row: str = 'A'):
    return client.post(
        BOOKING_URL,
        json={'showtime_id': showtime_id, 'seat_number': seat, 'row': row},
        headers=auth_headers(customer_id),
    )


@pytest.mark.integration
class TestBookingApi:
    def test_health(self, client: TestClient) -> None:
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    def test_metrics_count_booking_outcomes(self, client: TestClient, showtime: Showtime) -> None:
        book(client, 1, showtime.id, seat='31')
        book(client, 2, showtime.id, seat='31')

        response = client.get('/metrics')

        assert response.status_code == 200
        assert 'seat_operation_requests_total{operation="book",result="success"}' in response.text
        assert 'seat_operation_requests_total{operation="book",result="collision"}' in response.text
        assert 'seat_operation_duration_seconds_bucket' in response.text

    def test_book_requires_sign_in(self, client: TestClient, showtime: Showtime) -> None:
        response = client.post(
            BOOKING_URL, json={'showtime_id': showtime.id, 'seat_number': '1', 'row': 'A'}
        )

        assert response.status_code == 401
        assert response.json()['detail'] == 'Please sign in'

    def test_garbage_token_is_rejected(self, client: TestClient, showtime: Showtime) -> None:
        response = client.post(
            BOOKING_URL,
            json={'showtime_id': showtime.id, 'seat_number': '1', 'row': 'A'},
            headers={'Authorization': 'Bearer not-a-jwt'},
        )

        assert response.status_code == 401
        assert response.json()['detail'] == 'Invalid token'

    def test_book_ticket(self, client: TestClient, store: InMemoryStore, showtime: Showtime) -> None:
        response = book(client, 1, showtime.id, seat='12', row='C')

        assert response.status_code == 201
        body = response.json()
        assert body['ticket']['row'] == 'C'
        assert body['ticket']['seat_number'] == '12'
        assert body['ticket']['status'] == TicketStatus.CONFIRMED.value
        assert Decimal(body['ticket']['price']) == showtime.price
        assert body['payment']['amount'] == body['ticket']['price'] == '12.50'
        assert body['payment']['status'] == PaymentStatus.COMPLETED.value
        assert body['booking']['seats'] == ['C12']
        assert store.showtimes[showtime.id].available_seats == showtime.available_seats - 1

    def test_seat_collision(self, client: TestClient, showtime: Showtime) -> None:
        assert book(client, 1, showtime.id).status_code == 201

        response = book(client, 2, showtime.id)

        assert response.status_code == 400
        assert response.json() == {'detail': 'Seat is already booked', 'retryable': True}

    def test_unknown_showtime(self, client: TestClient) -> None:
        response = book(client, 1, 999)

        assert response.status_code == 404

    def test_blank_seat(self, client: TestClient, showtime: Showtime) -> None:
        response = book(client, 1, showtime.id, seat='  ')

        assert response.status_code == 400

    def test_cancel_booking(self, client: TestClient, store: InMemoryStore, showtime: Showtime) -> None:
        ticket_id = book(client, 1, showtime.id).json()['ticket']['id']

        response = client.delete(f'{BOOKING_URL}/{ticket_id}', headers=auth_headers(1))

        assert response.status_code == 200
        assert response.json() == {
            'success': True,
            'message': 'Booking cancelled and payment refunded',
            'ticket_id': ticket_id,
        }
        assert store.showtimes[showtime.id].available_seats == showtime.available_seats

        again = client.delete(f'{BOOKING_URL}/{ticket_id}', headers=auth_headers(1))
        assert again.status_code == 400

    def test_cancel_someone_elses_ticket(self, client: TestClient, showtime: Showtime) -> None:
        ticket_id = book(client, 1, showtime.id).json()['ticket']['id']

        response = client.delete(f'{BOOKING_URL}/{ticket_id}', headers=auth_headers(2))

        assert response.status_code == 404
        assert response.json()['detail'] == 'Ticket not found'

    def test_my_tickets_and_history(self, client: TestClient, showtime: Showtime) -> None:
        ticket_id = book(client, 1, showtime.id).json()['ticket']['id']
        book(client, 2, showtime.id, seat='2')

        tickets = client.get(f'{BOOKING_URL}/tickets', headers=auth_headers(1)).json()
        history = client.get(f'{BOOKING_URL}/history', headers=auth_headers(1)).json()

        assert [t['id'] for t in tickets] == [ticket_id]
        assert tickets[0]['payment_status'] == PaymentStatus.COMPLETED.value
        assert tickets[0]['movie_id'] == showtime.movie_id
        assert [h['ticket_id'] for h in history] == [ticket_id]
        assert history[0]['status'] == BookingStatus.CONFIRMED.value

    def test_my_tickets_requires_sign_in(self, client: TestClient) -> None:
        assert client.get(f'{BOOKING_URL}/tickets').status_code == 401

    def test_availability(self, client: TestClient, showtime: Showtime) -> None:
        book(client, 1, showtime.id)

        response = client.get(f'{BOOKING_URL}/showtime/{showtime.id}/availability')

        assert response.status_code == 200
        body = response.json()
        assert body['booked_seats'] == 1
        assert body['available_seats'] == showtime.theater_capacity - 1
        assert body['is_consistent'] is True
        assert body['seats'] == [
            {'row': 'A', 'seat_number': '1', 'status': SeatClaimStatus.BOOKED.value, 'version': 0}
        ]


@pytest.mark.integration
class TestSeatHoldApi:
    def test_hold_blocks_others_until_released(self, client: TestClient, showtime: Showtime) -> None:
        seat = {'showtime_id': showtime.id, 'seat_number': '5', 'row': 'B'}

        hold = client.post(f'{BOOKING_URL}/hold', json=seat, headers=auth_headers(1))
        assert hold.status_code == 201
        assert hold.json()['status'] == SeatClaimStatus.RESERVED.value
        assert hold.json()['locked_by'] == 1

        blocked = book(client, 2, showtime.id, seat='5', row='B')
        assert blocked.status_code == 409
        assert blocked.json()['retryable'] is True

        released = client.request(
            'DELETE', f'{BOOKING_URL}/hold', json=seat, headers=auth_headers(1)
        )
        assert released.status_code == 200
        assert released.json() == {'released': True}

        assert book(client, 2, showtime.id, seat='5', row='B').status_code == 201

    def test_hold_rejects_non_positive_ttl(self, client: TestClient, showtime: Showtime) -> None:
        response = client.post(
            f'{BOOKING_URL}/hold',
            json={'showtime_id': showtime.id, 'seat_number': '5', 'row': 'B', 'ttl_seconds': 0},
            headers=auth_headers(1),
        )

        assert response.status_code == 400

    def test_release_without_hold(self, client: TestClient, showtime: Showtime) -> None:
        response = client.request(
            'DELETE',
            f'{BOOKING_URL}/hold',
            json={'showtime_id': showtime.id, 'seat_number': '5', 'row': 'B'},
            headers=auth_headers(1),
        )

        assert response.status_code == 200
        assert response.json() == {'released': False}
