"""
Payment enums

Values are upper-case to match what the payment records have always stored.
"""

from enum import StrEnum


class PaymentMethod(StrEnum):
    CASH = 'CASH'
    CARD = 'CARD'
    ONLINE = 'ONLINE'


class PaymentStatus(StrEnum):
    PENDING = 'PENDING'
    COMPLETED = 'COMPLETED'
    FAILED = 'FAILED'
    REFUNDED = 'REFUNDED'
