from django.contrib import admin
from .models import Order, OrderItem, PaymentNotification


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


class PaymentNotificationInline(admin.TabularInline):
    model = PaymentNotification
    extra = 0
    can_delete = False
    readonly_fields = ('status', 'nonce', 'source', 'payload', 'created_at')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'status', 'total', 'currency', 'payment_reference_id', 'paid_at', 'created_at')
    list_filter = ('status', 'currency', 'created_at')
    search_fields = ('id', 'payment_reference_id', 'transaction_id', 'billing_email', 'billing_last_name')
    readonly_fields = ('payment_reference_id', 'transaction_id', 'paid_at', 'created_at', 'updated_at')
    inlines = [OrderItemInline, PaymentNotificationInline]

    fieldsets = (
        ('Order Information', {
            'fields': ('status', 'total', 'currency')
        }),
        ('Billing', {
            'fields': ('billing_first_name', 'billing_last_name', 'billing_email')
        }),
        ('Payment Information', {
            'fields': ('payment_reference_id', 'transaction_id', 'paid_at'),
            'description': 'Filled from the EazzPay initiation response and payment notifications'
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )


@admin.register(PaymentNotification)
class PaymentNotificationAdmin(admin.ModelAdmin):
    list_display = ('order', 'status', 'source', 'nonce', 'created_at')
    list_filter = ('status', 'source', 'created_at')
    search_fields = ('order__id', 'nonce')
    readonly_fields = ('order', 'status', 'nonce', 'source', 'payload', 'created_at')
