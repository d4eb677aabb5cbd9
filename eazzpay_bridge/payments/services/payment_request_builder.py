"""
Builds the EazzPay payment-initiation payload from order data.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional

from payments.exceptions import PaymentValidationError
from payments.user_messages import ERROR_MESSAGES

MINOR_UNIT = Decimal('0.01')
DEFAULT_CUSTOMER_NAME = 'Unknown'


@dataclass(frozen=True)
class PaymentRequest:
    amount: Decimal
    currency: str
    customer_name: str
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None
    notify_url: Optional[str] = None
    notify_method: str = 'POST'
    metadata: Optional[Dict[str, Any]] = field(default=None)

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation expected by the INIT endpoint; the amount always carries two places."""
        payload = {
            'amount': format(_to_decimal(self.amount).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP), 'f'),
            'cus_name': self.customer_name,
        }
        if self.metadata is not None:
            payload['metadata'] = self.metadata
        if self.success_url is not None:
            payload['success_url'] = self.success_url
        if self.cancel_url is not None:
            payload['cancel_url'] = self.cancel_url
        if self.notify_url is not None:
            payload['ipn_url'] = self.notify_url
        payload['ipn_method'] = self.notify_method
        return payload


def _to_decimal(value) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise PaymentValidationError(ERROR_MESSAGES['invalid_amount'])


def convert_amount(amount, currency: str, exchange_rate, settlement_currency: str = 'BDT') -> Decimal:
    """
    Converts an order amount into the settlement currency.

    Amounts already in the settlement currency are returned unchanged.
    Otherwise a USD settlement divides by the rate and any other settlement
    currency multiplies by it; the result is rounded half-up to two places.
    """
    amount = _to_decimal(amount) if amount else Decimal('0')
    if currency == settlement_currency:
        return amount

    rate = _to_decimal(exchange_rate)
    if rate <= 0:
        raise PaymentValidationError(ERROR_MESSAGES['invalid_exchange_rate'])

    if settlement_currency == 'USD':
        converted = amount / rate
    else:
        converted = amount * rate
    return converted.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


def build_payment_request(order_amount, order_currency, customer_name=None, success_url=None,
                          cancel_url=None, notify_url=None, notify_method='POST', metadata=None,
                          exchange_rate=Decimal('120'), settlement_currency='BDT') -> PaymentRequest:
    if not order_currency:
        raise PaymentValidationError(ERROR_MESSAGES['currency_required'])

    amount = convert_amount(order_amount, order_currency, exchange_rate, settlement_currency)
    name = (customer_name or '').strip() or DEFAULT_CUSTOMER_NAME

    return PaymentRequest(
        amount=amount,
        currency=settlement_currency,
        customer_name=name,
        success_url=success_url,
        cancel_url=cancel_url,
        notify_url=notify_url,
        notify_method=notify_method,
        metadata=metadata,
    )
