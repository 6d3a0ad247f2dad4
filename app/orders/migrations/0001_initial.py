import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("paid", "Paid"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the order (managed by FSM)",
                        max_length=50,
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("register", "Register"),
                            ("renew", "Renew"),
                            ("transfer", "Transfer"),
                        ],
                        default="register",
                        help_text="Registry operation to perform",
                        max_length=20,
                    ),
                ),
                (
                    "domain_name",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Fully qualified domain name",
                        max_length=253,
                    ),
                ),
                (
                    "registry_customer_id",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Rdash customer id that will own the domain",
                        null=True,
                    ),
                ),
                (
                    "registry_domain_id",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Rdash domain id (required for renewals)",
                        null=True,
                    ),
                ),
                (
                    "auth_code",
                    models.CharField(
                        blank=True,
                        help_text="Transfer authorization (EPP) code",
                        max_length=255,
                    ),
                ),
                (
                    "period",
                    models.PositiveSmallIntegerField(
                        default=1,
                        help_text="Registration period in years",
                    ),
                ),
                (
                    "whois_protection",
                    models.BooleanField(
                        default=False,
                        help_text="Buy WHOIS privacy protection",
                    ),
                ),
                (
                    "renew_current_date",
                    models.DateField(
                        blank=True,
                        help_text="Current expiry date sent to the registry on renewal",
                        null=True,
                    ),
                ),
                (
                    "gateway_reference",
                    models.CharField(
                        blank=True,
                        help_text="Gateway reference of the payment that paid this order",
                        max_length=255,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        blank=True,
                        help_text="Gateway payment method code",
                        max_length=20,
                    ),
                ),
                (
                    "notes",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Append-only history of payment and provisioning events",
                    ),
                ),
                (
                    "rdash_response",
                    models.JSONField(
                        blank=True,
                        help_text="Raw registry response of the last successful provisioning",
                        null=True,
                    ),
                ),
                (
                    "rdash_error",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Registry error of the last failed provisioning",
                    ),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="Customer who placed the order",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "created_at"],
                        name="order_status_created_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("period__gte", 1)),
                        name="order_period_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Domain",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.BigIntegerField(
                        help_text="Registry-assigned domain id",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "customer_id",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Registry customer id",
                        null=True,
                    ),
                ),
                ("name", models.CharField(db_index=True, max_length=253)),
                ("status", models.CharField(default="active", max_length=50)),
                ("nameserver_1", models.CharField(blank=True, max_length=255)),
                ("nameserver_2", models.CharField(blank=True, max_length=255)),
                ("nameserver_3", models.CharField(blank=True, max_length=255)),
                ("nameserver_4", models.CharField(blank=True, max_length=255)),
                ("nameserver_5", models.CharField(blank=True, max_length=255)),
                ("expired_at", models.DateTimeField(blank=True, null=True)),
                (
                    "synced_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        help_text="Order that provisioned this domain",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="domains",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Domain",
                "verbose_name_plural": "Domains",
                "ordering": ["name"],
            },
        ),
    ]
