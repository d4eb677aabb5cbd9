"""
Order Status Reconciler.

Maps the processor's payment status vocabulary onto order statuses. Used by
the IPN endpoint, the success redirect (after verification) and the
background verification task.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from payments.exceptions import InvalidNotificationError
from payments.models import Order, PaymentNotification
from payments.services.gateway_config import GatewayConfig
from payments.user_messages import ERROR_MESSAGES

logger = logging.getLogger('status_reconciler')

STATUS_COMPLETED = 'COMPLETED'
STATUS_FAILED = 'FAILED'
STATUS_PENDING = 'PENDING'
STATUS_CANCELED = 'CANCELED'

# COMPLETED maps per order, see GatewayConfig.post_payment_status
STATUS_TRANSITIONS = {
    STATUS_FAILED: Order.STATUS_FAILED,
    STATUS_PENDING: Order.STATUS_PENDING,
    STATUS_CANCELED: Order.STATUS_CANCELLED,
}

KNOWN_STATUSES = frozenset(STATUS_TRANSITIONS) | {STATUS_COMPLETED}


@dataclass(frozen=True)
class Notification:
    reference: str
    status: str
    invoice_id: Optional[str] = None
    transaction_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload):
        """
        Raises:
            InvalidNotificationError: payload is not an object or has no reference
        """
        if not isinstance(payload, dict):
            raise InvalidNotificationError(ERROR_MESSAGES['invalid_notification'])

        reference = payload.get('reference')
        if reference is None or str(reference).strip() == '':
            raise InvalidNotificationError(ERROR_MESSAGES['invalid_notification'])

        invoice_id = payload.get('invoice_id')
        transaction_id = payload.get('transaction_id')
        return cls(
            reference=str(reference).strip(),
            status=str(payload.get('status') or '').strip().upper(),
            invoice_id=str(invoice_id) if invoice_id else None,
            transaction_id=str(transaction_id) if transaction_id else None,
        )

    @property
    def nonce(self):
        return self.invoice_id or self.transaction_id or ''


@dataclass(frozen=True)
class ReconcileResult:
    order: Order
    applied: bool
    old_status: str
    new_status: str
    reason: str = ''


class OrderStatusReconciler:
    def __init__(self, config: Optional[GatewayConfig] = None):
        self.config = config or GatewayConfig.from_settings()

    def target_status(self, order, status):
        """Order status for a processor status, None when it is not ours to act on."""
        if status == STATUS_COMPLETED:
            return self.config.post_payment_status(order)
        return STATUS_TRANSITIONS.get(status)

    def reconcile(self, notification, order=None, source=PaymentNotification.SOURCE_IPN, payload=None):
        """
        Applies a processor notification to its order.

        Args:
            notification: Notification instance
            order: Order already loaded by the caller, looked up by reference otherwise
            source: Where the notification came from (ipn, return, verify)
            payload: Raw body stored in the ledger

        Returns:
            ReconcileResult

        Raises:
            Order.DoesNotExist: no order matches the reference
        """
        if order is None:
            order = get_order(notification.reference)

        logger.info(
            f"Reconciling order {order.pk}: processor status={notification.status}, "
            f"current status={order.status}, source={source}, nonce={notification.nonce or '-'}"
        )

        new_status = self.target_status(order, notification.status)
        if new_status is None:
            logger.warning(f"Order {order.pk}: ignoring unknown processor status '{notification.status}'")
            return ReconcileResult(order, False, order.status, order.status, 'ignored')

        try:
            with transaction.atomic():
                PaymentNotification.objects.create(
                    order=order,
                    status=notification.status,
                    nonce=notification.nonce,
                    source=source,
                    payload=payload,
                )
                old_status = order.status
                if notification.status == STATUS_COMPLETED:
                    self._mark_payment_complete(order, new_status, notification)
                else:
                    order.update_status(new_status)
        except IntegrityError:
            logger.info(
                f"Order {order.pk}: duplicate {notification.status} notification "
                f"(nonce={notification.nonce or '-'}), skipping"
            )
            order.refresh_from_db()
            return ReconcileResult(order, False, order.status, order.status, 'duplicate')

        logger.info(f"Order {order.pk} status changed: {old_status} → {order.status}")
        return ReconcileResult(order, True, old_status, order.status)

    def _mark_payment_complete(self, order, new_status, notification):
        order.status = new_status
        order.paid_at = order.paid_at or timezone.now()
        if notification.transaction_id:
            order.transaction_id = notification.transaction_id
        if notification.invoice_id and not order.payment_reference_id:
            order.payment_reference_id = notification.invoice_id
        order.save(update_fields=['status', 'paid_at', 'transaction_id', 'payment_reference_id', 'updated_at'])


def get_order(reference):
    """
    Raises:
        Order.DoesNotExist: reference is unknown or not a valid order id
    """
    try:
        return Order.objects.get(pk=reference)
    except (ValueError, TypeError):
        raise Order.DoesNotExist(f"Invalid order reference: {reference}")
