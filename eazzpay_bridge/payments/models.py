from django.conf import settings
from django.db import models


class Order(models.Model):
    """
    Store order paid through the EazzPay hosted payment page.

    The bridge only reads billing and amount fields to build the payment
    request and writes the status (plus payment references) on outcome events.
    """
    STATUS_PENDING = 'pending'
    STATUS_PROCESSING = 'processing'
    STATUS_COMPLETED = 'completed'
    STATUS_FAILED = 'failed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_ON_HOLD = 'on-hold'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending payment'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_FAILED, 'Failed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_ON_HOLD, 'On hold'),
    ]

    # Statuses an order may be moved to once payment is confirmed
    POST_PAYMENT_STATUSES = (STATUS_ON_HOLD, STATUS_PROCESSING, STATUS_COMPLETED)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    currency = models.CharField(max_length=3, default='BDT')
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    billing_first_name = models.CharField(max_length=255, blank=True, default='')
    billing_last_name = models.CharField(max_length=255, blank=True, default='')
    billing_email = models.EmailField(blank=True, default='')

    payment_reference_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text='EazzPay invoice ID returned when the payment was initiated'
    )
    transaction_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text='Processor transaction ID reported on payment completion'
    )
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['status', 'updated_at'], name='payments_or_status_upd_idx'),
        ]

    def save(self, *args, **kwargs):
        if self._state.adding and not self.currency:
            self.currency = getattr(settings, 'STORE_CURRENCY', 'BDT')
        super().save(*args, **kwargs)

    @property
    def customer_name(self):
        return f"{self.billing_first_name} {self.billing_last_name}".strip()

    def needs_processing(self):
        """True when at least one line item has to be shipped."""
        return any(item.is_shippable for item in self.items.all())

    def update_status(self, new_status):
        """
        Sets a new status and persists it.

        Returns:
            str: the previous status
        """
        old_status = self.status
        self.status = new_status
        self.save(update_fields=['status', 'updated_at'])
        return old_status

    def __str__(self):
        return f"Order {self.pk} ({self.status})"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    is_virtual = models.BooleanField(default=False)
    is_downloadable = models.BooleanField(default=False)

    @property
    def is_shippable(self):
        return not (self.is_virtual or self.is_downloadable)

    def __str__(self):
        return f"{self.name} x{self.quantity}"


class PaymentNotification(models.Model):
    """
    Ledger of processed payment notifications.

    One row per (order, status, nonce); a redelivered IPN or a repeated
    verification result finds its row and is not applied again.
    """
    SOURCE_IPN = 'ipn'
    SOURCE_RETURN = 'return'
    SOURCE_VERIFY = 'verify'

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='notifications')
    status = models.CharField(max_length=32)
    nonce = models.CharField(
        max_length=255,
        blank=True,
        default='',
        help_text='Invoice or transaction ID carried by the notification, empty if none'
    )
    source = models.CharField(max_length=16, choices=[
        (SOURCE_IPN, 'IPN'),
        (SOURCE_RETURN, 'Success redirect'),
        (SOURCE_VERIFY, 'Verification'),
    ], default=SOURCE_IPN)
    payload = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['order', 'status', 'nonce'], name='unique_payment_notification'),
        ]

    def __str__(self):
        return f"Notification {self.status} for order {self.order_id}"
