"""
URL configuration for eazzpay_bridge project.
"""
from django.contrib import admin
from django.urls import path
from payments.views import (
    initiate_payment,
    payment_success,
    payment_cancel,
    eazzpay_ipn,
)

urlpatterns = [
    path('admin/', admin.site.urls),

    # Checkout starts here; answers with the hosted payment page URL
    path('v1/eazzpay/initiate', initiate_payment, name='eazzpay_initiate'),

    # Browser returns from the hosted payment page
    path('v1/eazzpay/success', payment_success, name='eazzpay_success'),
    path('v1/eazzpay/cancel', payment_cancel, name='eazzpay_cancel'),

    # Server-to-server payment notification
    path('v1/eazzpay/ipn', eazzpay_ipn, name='eazzpay_ipn'),
]
