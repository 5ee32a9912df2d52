from django.conf import settings
from django.db import models


class ImmutableRecordError(Exception):
    pass


class ActionRecord(models.Model):
    """
    Immutable history of workflow transitions, one row per applied action.
    """

    requisition = models.ForeignKey(
        "workflow.Requisition",
        on_delete=models.PROTECT,
        related_name="actions",
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="requisition_actions",
        help_text="Empty for system (auto-escalation) actions.",
    )
    action = models.CharField(max_length=32)
    from_level = models.CharField(max_length=32)
    to_level = models.CharField(max_length=32)
    comment = models.TextField(blank=True, default="")
    is_automatic = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["requisition", "created_at"], name="audit_req_created_idx"),
        ]

    def __str__(self):
        return f"{self.requisition_id}: {self.action} {self.from_level} -> {self.to_level}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ImmutableRecordError("Action records cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError("Action records cannot be deleted.")
