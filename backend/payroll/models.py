"""
Payroll models for PayCycle - Payroll Calculation Engine
Finalized payroll records (PAYE, NSSF, SHIF, Housing Levy, EWA and other deductions)
and the statutory tax table.
"""
from django.db import models
from django.conf import settings
from decimal import Decimal
from core.models import BaseModel


class PayrollPeriod(BaseModel):
    """
    A finalized pay period.
    All payroll entries for a period are grouped here.
    """

    class Status(models.TextChoices):
        DRAFT = 'draft', 'Draft'
        FINALIZED = 'finalized', 'Finalized'

    start_date = models.DateField()
    end_date = models.DateField()
    name = models.CharField(max_length=50, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT
    )

    finalized_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payroll_finalized'
    )
    finalized_at = models.DateTimeField(null=True, blank=True)
    note = models.TextField(blank=True)

    # Totals (computed)
    employee_count = models.IntegerField(default=0)
    total_gross = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_deductions = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_net = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_ewa = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_paye = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_nssf = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_shif = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_housing_levy = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    class Meta:
        unique_together = ['start_date', 'end_date']
        ordering = ['-end_date']

    def __str__(self):
        return self.name or f"{self.start_date} to {self.end_date}"

    def save(self, *args, **kwargs):
        if not self.name:
            self.name = f"{self.start_date:%d %b %Y} - {self.end_date:%d %b %Y}"
        super().save(*args, **kwargs)

    @property
    def is_finalized(self):
        return self.status == self.Status.FINALIZED

    @classmethod
    def previous_finalized(cls, before_date):
        """Latest finalized period ending before the given date."""
        return cls.objects.filter(
            status=cls.Status.FINALIZED,
            end_date__lt=before_date
        ).order_by('-end_date').first()

    def calculate_totals(self):
        """Recalculate totals from all entries."""
        entries = list(self.entries.all())
        self.employee_count = len(entries)
        self.total_gross = sum(e.gross_pay for e in entries)
        self.total_deductions = sum(e.total_deductions for e in entries)
        self.total_net = sum(e.net_pay for e in entries)
        self.total_ewa = sum(e.ewa_deductions for e in entries)
        self.total_paye = sum(e.paye for e in entries)
        self.total_nssf = sum(e.nssf for e in entries)
        self.total_shif = sum(e.shif for e in entries)
        self.total_housing_levy = sum(e.housing_levy for e in entries)
        self.save()


class PayrollEntry(BaseModel):
    """
    Individual payroll entry for an employee in a finalized period.
    Read-only once written: it is the system of record for what was paid.
    """

    class Status(models.TextChoices):
        COMPLETE = 'complete', 'Complete'
        WARNING = 'warning', 'Warning'
        ERROR = 'error', 'Error'

    payroll_period = models.ForeignKey(
        PayrollPeriod,
        on_delete=models.CASCADE,
        related_name='entries'
    )
    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='payroll_entries'
    )
    employee_number = models.CharField(max_length=20, blank=True)
    department = models.CharField(max_length=100, blank=True)
    position = models.CharField(max_length=100, blank=True)

    # Hours
    hours_worked = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    overtime_hours = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    # Gross pay
    gross_pay = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    taxable_income = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # Statutory deductions
    paye = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text='Pay As You Earn tax after personal relief'
    )
    nssf = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text='NSSF pension contribution (tiered, capped)'
    )
    shif = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text='Social Health Insurance Fund (2.75% of gross)'
    )
    housing_levy = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text='Affordable Housing Levy (1.5% of gross)'
    )

    # Variable deductions
    ewa_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    loan_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    other_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # Net pay
    total_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    net_pay = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # Classification and audit
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.COMPLETE)
    status_reason = models.CharField(max_length=255, blank=True)
    is_edited = models.BooleanField(default=False)
    original_net_pay = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    class Meta:
        unique_together = ['payroll_period', 'employee']
        ordering = ['employee__first_name', 'employee__last_name']
        verbose_name_plural = 'Payroll Entries'

    def __str__(self):
        return f"{self.employee.get_full_name()} - {self.payroll_period}"


class TaxTable(BaseModel):
    """
    Statutory rates configuration.
    Allows updating tax rates without code changes.
    """

    effective_from = models.DateField()
    effective_to = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    # Tax bands (monthly cumulative upper limits in KES)
    band_1_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=24000,
        help_text='Upper limit for 10% band'
    )
    band_1_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal('0.10')
    )

    band_2_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=32333,
        help_text='Upper limit for 25% band'
    )
    band_2_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal('0.25')
    )

    band_3_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=500000,
        help_text='Upper limit for 30% band'
    )
    band_3_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal('0.30')
    )

    band_4_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=800000,
        help_text='Upper limit for 32.5% band'
    )
    band_4_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal('0.325')
    )

    band_5_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal('0.35'),
        help_text='Rate for income above band 4'
    )

    personal_relief = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=2400
    )

    # NSSF tiers
    nssf_lower_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=8000,
        help_text='Gross pay up to which the fixed minimum applies'
    )
    nssf_minimum = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=480
    )
    nssf_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal('0.06')
    )
    nssf_upper_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=72000
    )
    nssf_maximum = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=4320
    )

    # SHIF rate
    shif_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal('0.0275')
    )

    # Housing Levy rate
    housing_levy_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal('0.015')
    )

    CONFIG_FIELDS = [
        'band_1_limit', 'band_1_rate',
        'band_2_limit', 'band_2_rate',
        'band_3_limit', 'band_3_rate',
        'band_4_limit', 'band_4_rate',
        'band_5_rate',
        'personal_relief',
        'nssf_lower_limit', 'nssf_minimum', 'nssf_rate', 'nssf_upper_limit', 'nssf_maximum',
        'shif_rate',
        'housing_levy_rate',
    ]

    class Meta:
        ordering = ['-effective_from']

    def __str__(self):
        return f"Tax Table from {self.effective_from}"

    def as_config(self):
        """Calculator configuration built from this table."""
        return {name: Decimal(str(getattr(self, name))) for name in self.CONFIG_FIELDS}

    @classmethod
    def get_active(cls, date=None):
        """Get the active tax table for a given date."""
        from django.utils import timezone
        if date is None:
            date = timezone.now().date()

        return cls.objects.filter(
            is_active=True,
            effective_from__lte=date
        ).filter(
            models.Q(effective_to__isnull=True) | models.Q(effective_to__gte=date)
        ).first()
