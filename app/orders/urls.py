"""
URL configuration for the orders app.

Routes:
    - POST /{id}/provision/ - Operator-triggered provisioning

All routes are prefixed with /api/v1/orders/ when included in the main URLconf.
"""

from django.urls import path

from orders.views import ProvisionOrderView

app_name = "orders"

urlpatterns = [
    path("<int:pk>/provision/", ProvisionOrderView.as_view(), name="provision"),
]
