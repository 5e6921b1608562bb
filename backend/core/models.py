"""
Core models and mixins for PayCycle - Payroll Calculation Engine
"""
from django.db import models
from django.conf import settings
import uuid


class BaseModel(models.Model):
    """
    Abstract base model with common fields for all models.
    Provides audit trail functionality.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_created'
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_updated'
    )

    class Meta:
        abstract = True
class AuditLog(models.Model):
    """
    Trail of reviewer actions on payroll: manual adjustments, exclusions
    and period finalization. Rows are written inside the finalize
    transaction, so an aborted finalize leaves no trail.
    """

    class ActionType(models.TextChoices):
        ADJUST = 'adjust', 'Manual Adjustment'
        EXCLUDE = 'exclude', 'Excluded From Run'
        FINALIZE = 'finalize', 'Finalize Period'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    timestamp = models.DateTimeField(auto_now_add=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs'
    )
    action = models.CharField(max_length=20, choices=ActionType.choices)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100, blank=True)
    object_repr = models.CharField(max_length=255, blank=True)
    changes = models.JSONField(
        default=dict,
        blank=True,
        help_text='Field name to [before, after]'
    )
    reason = models.TextField(blank=True)

    class Meta:
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['model_name', 'object_id'], name='core_audit_object_idx'),
            models.Index(fields=['action', 'timestamp'], name='core_audit_action_ts_idx'),
        ]

    def __str__(self):
        return f"{self.get_action_display()}: {self.object_repr or self.object_id} by {self.user or 'system'}"

    @classmethod
    def history(cls, model_name, object_id):
        """Everything recorded against one object, oldest first."""
        return cls.objects.filter(model_name=model_name, object_id=str(object_id)).order_by('timestamp')

    @classmethod
    def log(cls, user, action, model_name, object_id='', object_repr='', changes=None, reason=''):
        """Write one trail entry. object_repr is truncated to fit the column."""
        return cls.objects.create(
            user=user,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_repr=(object_repr or '')[:255],
            changes=changes or {},
            reason=reason or '',
        )
