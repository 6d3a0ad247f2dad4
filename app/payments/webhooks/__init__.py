"""
Inbound payment gateway callbacks.

Usage:
    # In urls.py
    from payments.webhooks.views import gateway_callback

    urlpatterns = [
        path("callback/", gateway_callback, name="gateway_callback"),
    ]
"""
