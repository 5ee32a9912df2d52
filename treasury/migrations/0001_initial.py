from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("workflow", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Fund",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("currency", models.CharField(max_length=3, unique=True)),
                ("available", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=19)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["currency"],
                "constraints": [models.CheckConstraint(condition=models.Q(("available__gte", 0)), name="fund_available_non_negative")],
            },
        ),
        migrations.CreateModel(
            name="FundMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("movement_type", models.CharField(choices=[("in", "In"), ("out", "Out")], max_length=3)),
                ("amount", models.DecimalField(decimal_places=4, max_digits=19)),
                ("currency", models.CharField(db_index=True, max_length=3)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("requisition", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="fund_movements", to="workflow.requisition")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="fund_movement_positive")],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount_usd", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=19)),
                ("amount_cdf", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=19)),
                ("comment", models.TextField(blank=True, default="")),
                ("paid_at", models.DateTimeField(auto_now_add=True)),
                ("payer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="payments_made", to=settings.AUTH_USER_MODEL)),
                ("requisition", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="payment", to="workflow.requisition")),
            ],
            options={
                "ordering": ["-paid_at"],
            },
        ),
    ]
