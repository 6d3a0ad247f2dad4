"""
Serializers for the operator provisioning endpoint.

The endpoint takes no request body; these serializers describe the
response envelope for the OpenAPI schema and shape the outcome payload.
"""

from rest_framework import serializers

from orders.models import Order


class FulfillmentOutcomeSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    status = serializers.ChoiceField(choices=Order._meta.get_field("status").choices)
    rdash_success = serializers.BooleanField()
    message = serializers.CharField()
    already_completed = serializers.BooleanField()
    domain_id = serializers.IntegerField(allow_null=True)


class ProvisionSuccessSerializer(serializers.Serializer):
    success = serializers.BooleanField(default=True)
    data = FulfillmentOutcomeSerializer()


class ProvisionErrorSerializer(serializers.Serializer):
    success = serializers.BooleanField(default=False)
    error = serializers.CharField()
    error_code = serializers.CharField()
    data = FulfillmentOutcomeSerializer(required=False)
