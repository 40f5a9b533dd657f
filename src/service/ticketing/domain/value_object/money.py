from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from src.platform.exception.exceptions import DomainError


CENTS = Decimal('0.01')


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Two-decimal amount; floats go through str so 12.37 stays 12.37"""
    try:
        amount = Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise DomainError(f'Invalid amount: {value!r}') from e
    if amount < 0:
        raise DomainError('Amount cannot be negative')
    return amount
