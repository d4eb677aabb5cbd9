# Initial schema for EazzPay orders and the processed-notification ledger

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending payment'),
                        ('processing', 'Processing'),
                        ('completed', 'Completed'),
                        ('failed', 'Failed'),
                        ('cancelled', 'Cancelled'),
                        ('on-hold', 'On hold'),
                    ],
                    default='pending',
                    max_length=20,
                )),
                ('currency', models.CharField(default='BDT', max_length=3)),
                ('total', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('billing_first_name', models.CharField(blank=True, default='', max_length=255)),
                ('billing_last_name', models.CharField(blank=True, default='', max_length=255)),
                ('billing_email', models.EmailField(blank=True, default='', max_length=254)),
                ('payment_reference_id', models.CharField(
                    blank=True,
                    help_text='EazzPay invoice ID returned when the payment was initiated',
                    max_length=255,
                    null=True,
                )),
                ('transaction_id', models.CharField(
                    blank=True,
                    help_text='Processor transaction ID reported on payment completion',
                    max_length=255,
                    null=True,
                )),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('price', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('is_virtual', models.BooleanField(default=False)),
                ('is_downloadable', models.BooleanField(default=False)),
                ('order', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='items',
                    to='payments.order',
                )),
            ],
        ),
        migrations.CreateModel(
            name='PaymentNotification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(max_length=32)),
                ('nonce', models.CharField(
                    blank=True,
                    default='',
                    help_text='Invoice or transaction ID carried by the notification, empty if none',
                    max_length=255,
                )),
                ('source', models.CharField(
                    choices=[('ipn', 'IPN'), ('return', 'Success redirect'), ('verify', 'Verification')],
                    default='ipn',
                    max_length=16,
                )),
                ('payload', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='notifications',
                    to='payments.order',
                )),
            ],
        ),
        migrations.AddConstraint(
            model_name='paymentnotification',
            constraint=models.UniqueConstraint(fields=('order', 'status', 'nonce'), name='unique_payment_notification'),
        ),
        # Speeds up the background verification query
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['status', 'updated_at'], name='payments_or_status_upd_idx'),
        ),
    ]
