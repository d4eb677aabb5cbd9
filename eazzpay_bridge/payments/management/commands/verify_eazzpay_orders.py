from django.core.management.base import BaseCommand
from payments.services.eazzpay_client import EazzPayClient
from payments.services.gateway_config import GatewayConfig
from payments.services.status_reconciler import OrderStatusReconciler
from payments.tasks import pending_orders_to_verify, verify_order_payment


class Command(BaseCommand):
    help = "Verify pending EazzPay orders against the VERIFY endpoint and update their status"

    def add_arguments(self, parser):
        parser.add_argument("--max", type=int, default=50)
        parser.add_argument("--older-than-seconds", type=int, default=0)

    def handle(self, *args, **opts):
        orders = list(pending_orders_to_verify(opts["older_than_seconds"], opts["max"]))
        if not orders:
            self.stdout.write(self.style.SUCCESS("No pending orders to verify."))
            return

        config = GatewayConfig.from_settings()
        client = EazzPayClient(config)
        reconciler = OrderStatusReconciler(config)

        for order in orders:
            result = verify_order_payment(order, client, reconciler)
            if result is None:
                self.stdout.write(self.style.WARNING(f"{order.pk}: verification failed"))
            elif result.applied:
                self.stdout.write(self.style.SUCCESS(f"Updated {order.pk}: {result.old_status} -> {result.new_status}"))
            else:
                self.stdout.write(f"{order.pk}: unchanged ({result.reason})")
