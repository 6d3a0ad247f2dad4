"""
Domain model mirroring a domain provisioned at the registry.

Rows are keyed by the registry-assigned id and written only after a
successful register or transfer, via Domain.upsert_from_registry().
"""

from __future__ import annotations

import logging
from datetime import datetime, time
from typing import TYPE_CHECKING

from django.db import models
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from core.models import BaseModel

if TYPE_CHECKING:
    from typing import Any

    from orders.models.order import Order

logger = logging.getLogger(__name__)

NAMESERVER_SLOTS = 5


def _parse_registry_datetime(value: Any) -> datetime | None:
    """Accept ISO datetimes or plain dates; return an aware datetime."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip().replace(" ", "T", 1)
        parsed = parse_datetime(text)
        if parsed is None:
            day = parse_date(str(value).strip()[:10])
            if day is None:
                logger.warning(
                    "Unparseable registry date",
                    extra={"value": str(value)},
                )
                return None
            parsed = datetime.combine(day, time.min)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, timezone.get_default_timezone())
    return parsed


class Domain(BaseModel):
    """
    A domain held at the registry on behalf of a customer.

    Fields:
        id: Registry-assigned domain id (conflict key for upserts)
        order: Order whose fulfillment last wrote this row
        customer_id: Registry customer id
        name: Domain name
        status: Registry status label
        nameserver_1..5: Delegated nameservers
        expired_at: Registry expiry timestamp
        synced_at: When this row was last written from a registry response
    """

    id = models.BigIntegerField(
        primary_key=True,
        help_text="Registry-assigned domain id",
    )

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="domains",
        help_text="Order that provisioned this domain",
    )

    customer_id = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Registry customer id",
    )

    name = models.CharField(max_length=253, db_index=True)

    status = models.CharField(max_length=50, default="active")

    nameserver_1 = models.CharField(max_length=255, blank=True)
    nameserver_2 = models.CharField(max_length=255, blank=True)
    nameserver_3 = models.CharField(max_length=255, blank=True)
    nameserver_4 = models.CharField(max_length=255, blank=True)
    nameserver_5 = models.CharField(max_length=255, blank=True)

    expired_at = models.DateTimeField(null=True, blank=True)

    synced_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["name"]
        verbose_name = "Domain"
        verbose_name_plural = "Domains"

    def __str__(self) -> str:
        return f"Domain({self.id}, {self.name}, {self.status})"

    @property
    def nameservers(self) -> list[str]:
        slots = (
            getattr(self, f"nameserver_{i}") for i in range(1, NAMESERVER_SLOTS + 1)
        )
        return [ns for ns in slots if ns]

    @classmethod
    def upsert_from_registry(
        cls, data: dict[str, Any], order: Order
    ) -> Domain | None:
        """
        Create or overwrite the row for a registry domain payload.

        Accepts both long (nameserver_1, expired_at) and short (ns1,
        expiry_date) field spellings. Returns None when the payload has
        no id to key on.
        """
        registry_id = data.get("id")
        if registry_id in (None, ""):
            logger.warning(
                "Registry response has no domain id, skipping domain upsert",
                extra={"order_id": order.pk},
            )
            return None

        defaults: dict[str, Any] = {
            "order": order,
            "customer_id": data.get("customer_id") or order.registry_customer_id,
            "name": data.get("name") or data.get("domain") or order.domain_name,
            "status": data.get("status") or "active",
            "expired_at": _parse_registry_datetime(
                data.get("expired_at") or data.get("expiry_date")
            ),
            "synced_at": timezone.now(),
        }
        for i in range(1, NAMESERVER_SLOTS + 1):
            defaults[f"nameserver_{i}"] = (
                data.get(f"nameserver_{i}") or data.get(f"ns{i}") or ""
            )

        domain, created = cls.objects.update_or_create(
            id=int(registry_id), defaults=defaults
        )
        logger.info(
            "Domain record %s",
            "created" if created else "updated",
            extra={
                "domain_id": domain.id,
                "domain_name": domain.name,
                "order_id": order.pk,
            },
        )
        return domain
