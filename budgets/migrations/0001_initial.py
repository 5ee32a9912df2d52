from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BudgetLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.CharField(max_length=255)),
                ("month", models.CharField(help_text="YYYY-MM", max_length=7)),
                ("year", models.PositiveIntegerField()),
                ("allocated", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=19)),
                ("consumed", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=19)),
                ("classification", models.CharField(blank=True, default="Other", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["month", "description"],
                "constraints": [
                    models.UniqueConstraint(fields=("description", "month"), name="unique_budget_line_month"),
                    models.CheckConstraint(condition=models.Q(("allocated__gte", 0), ("consumed__gte", 0)), name="budget_line_non_negative"),
                ],
            },
        ),
    ]
