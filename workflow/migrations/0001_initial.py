from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


LEVEL_CHOICES = [
    ("issuer", "Issuer"),
    ("service_approval", "Service approval"),
    ("analyst", "Analyst"),
    ("challenger", "Challenger"),
    ("validator", "Validator"),
    ("finance_gm", "Finance / GM"),
    ("compilation", "Compilation"),
    ("bordereau_alignment", "Bordereau alignment"),
    ("payment", "Payment"),
    ("accountant", "Accountant (legacy)"),
    ("done", "Done"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Requisition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(max_length=64, unique=True)),
                ("subject", models.CharField(max_length=255)),
                ("amount_usd", models.DecimalField(blank=True, decimal_places=4, max_digits=19, null=True)),
                ("amount_cdf", models.DecimalField(blank=True, decimal_places=4, max_digits=19, null=True)),
                ("level", models.CharField(choices=LEVEL_CHOICES, db_index=True, default="issuer", max_length=32)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("in_review", "In review"), ("needs_correction", "Needs correction"), ("validated", "Validated"), ("paid", "Paid"), ("rejected", "Rejected"), ("cancelled", "Cancelled"), ("done", "Done")], db_index=True, default="in_review", max_length=32)),
                ("return_level", models.CharField(blank=True, choices=LEVEL_CHOICES, default="", max_length=32)),
                ("budget_impacted", models.BooleanField(default=False)),
                ("payment_mode", models.CharField(blank=True, default="", max_length=32)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("issuer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="requisitions", to=settings.AUTH_USER_MODEL)),
                ("service", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="requisitions", to="core.service")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["level", "status", "updated_at"], name="req_level_status_upd_idx")],
            },
        ),
        migrations.CreateModel(
            name="LineItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.CharField(max_length=255)),
                ("quantity", models.DecimalField(decimal_places=2, default=Decimal("1.00"), max_digits=12)),
                ("unit_price", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=19)),
                ("line_total", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=19)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("requisition", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="line_items", to="workflow.requisition")),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="WorkflowSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("level", models.CharField(choices=LEVEL_CHOICES, max_length=32, unique=True)),
                ("delay_minutes", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["level"],
            },
        ),
    ]
