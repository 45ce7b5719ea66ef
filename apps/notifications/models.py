from django.db import models
import uuid


class NotificationType(models.TextChoices):
    NEW_EXPENSE = 'NEW_EXPENSE', 'New expense'
    EXPENSE_SETTLED = 'EXPENSE_SETTLED', 'Expense settled'


class Notification(models.Model):
    """In-app notification record; delivery to devices happens elsewhere."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=30, choices=NotificationType.choices)
    title = models.CharField(max_length=200)
    body = models.TextField(blank=True)
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notificatio_user_id_5e0c7b_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} -> {self.user_id}"
