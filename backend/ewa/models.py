"""
Earned Wage Access models for PayCycle - Payroll Calculation Engine
Advances are requested and disbursed upstream; disbursed advances are
recovered from the payroll of the period they were paid out in.
"""
from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils import timezone
from core.models import BaseModel


class EwaAdvance(BaseModel):
    """
    An advance against wages already earned in the current period.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        DISBURSED = 'disbursed', 'Disbursed'
        REJECTED = 'rejected', 'Rejected'

    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='ewa_advances'
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)]
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING
    )
    requested_at = models.DateTimeField(default=timezone.now)
    disbursed_at = models.DateTimeField(null=True, blank=True)
    reason = models.TextField(blank=True)

    class Meta:
        ordering = ['-requested_at']
        verbose_name = 'EWA Advance'
        verbose_name_plural = 'EWA Advances'

    def __str__(self):
        return f"{self.employee.get_full_name()} - {self.amount} ({self.status})"

    def disbursement_date(self):
        """Local calendar date of disbursement, or None if not paid out."""
        if self.disbursed_at is None:
            return None
        if timezone.is_aware(self.disbursed_at):
            return timezone.localtime(self.disbursed_at).date()
        return self.disbursed_at.date()

    def counts_towards(self, period):
        """Only disbursed advances paid out inside the period are deducted."""
        if self.status != self.Status.DISBURSED:
            return False
        disbursed_on = self.disbursement_date()
        return disbursed_on is not None and period.contains(disbursed_on)
