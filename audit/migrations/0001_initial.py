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
            name="ActionRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=32)),
                ("from_level", models.CharField(max_length=32)),
                ("to_level", models.CharField(max_length=32)),
                ("comment", models.TextField(blank=True, default="")),
                ("is_automatic", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("actor", models.ForeignKey(blank=True, help_text="Empty for system (auto-escalation) actions.", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="requisition_actions", to=settings.AUTH_USER_MODEL)),
                ("requisition", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="actions", to="workflow.requisition")),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["requisition", "created_at"], name="audit_req_created_idx")],
            },
        ),
    ]
