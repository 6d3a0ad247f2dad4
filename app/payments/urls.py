"""
URL configuration for the payments app.

Routes:
    - POST /callback/ - Duitku payment callback

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.

Usage:
    # In config/urls.py
    api_v1_patterns = [
        path("payments/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments.webhooks.views import gateway_callback

app_name = "payments"

urlpatterns = [
    path("callback/", gateway_callback, name="gateway_callback"),
]
