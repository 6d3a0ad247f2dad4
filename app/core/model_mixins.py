"""
Reusable abstract model mixins.

Mixins:
    UUIDPrimaryKeyMixin: UUID as primary key

Usage:
    from core.models import BaseModel
    from core.model_mixins import UUIDPrimaryKeyMixin

    class AuditLog(UUIDPrimaryKeyMixin, BaseModel):
        action = models.CharField(max_length=100)

Note:
    Mixins are abstract and don't create database tables.
"""

from __future__ import annotations

import uuid

from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Used for records that are referenced from outside the database
    (gateway transactions, audit entries) so their ids don't reveal
    record counts.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier (UUID v4)",
    )

    class Meta:
        abstract = True
