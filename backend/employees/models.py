"""
Employee models for PayCycle - Payroll Calculation Engine
"""
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.core.validators import MinValueValidator, RegexValidator
from core.models import BaseModel


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email address is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_on_payroll', False)
        return self.create_user(email, password, **extra_fields)

    def payable(self):
        """Employees eligible for a payroll run."""
        return self.filter(
            employment_status=User.EmploymentStatus.ACTIVE,
            is_active=True,
            is_on_payroll=True
        ).select_related('department')


class Department(BaseModel):
    """Department model for organizational structure."""

    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=10, unique=True)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class User(AbstractUser, BaseModel):
    """
    Custom User model. Every employee on the payroll is a User.
    Uses email as the primary identifier.
    """

    class EmploymentStatus(models.TextChoices):
        ACTIVE = 'active', 'Active'
        ON_LEAVE = 'on_leave', 'On Leave'
        SUSPENDED = 'suspended', 'Suspended'
        TERMINATED = 'terminated', 'Terminated'
        RESIGNED = 'resigned', 'Resigned'

    class EmploymentType(models.TextChoices):
        PERMANENT = 'permanent', 'Permanent'
        CONTRACT = 'contract', 'Contract'
        CASUAL = 'casual', 'Casual'
        INTERN = 'intern', 'Intern'

    # Remove username, use email instead
    username = None
    email = models.EmailField('email address', unique=True)

    # Personal Information
    employee_number = models.CharField(max_length=20, unique=True, blank=True, null=True)
    phone_regex = RegexValidator(
        regex=r'^\+?254?\d{9,12}$',
        message="Phone number must be in format: '+254712345678'"
    )
    phone_number = models.CharField(validators=[phone_regex], max_length=15, blank=True)
    national_id = models.CharField(max_length=20, blank=True)
    kra_pin = models.CharField(
        max_length=11,
        blank=True,
        help_text='KRA PIN (e.g., A012345678Z)'
    )
    nssf_number = models.CharField(max_length=20, blank=True)
    shif_number = models.CharField(max_length=20, blank=True)

    # Employment Details
    department = models.ForeignKey(
        Department,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='employees'
    )
    position = models.CharField(max_length=100, blank=True)
    employment_status = models.CharField(
        max_length=20,
        choices=EmploymentStatus.choices,
        default=EmploymentStatus.ACTIVE
    )
    employment_type = models.CharField(
        max_length=20,
        choices=EmploymentType.choices,
        default=EmploymentType.PERMANENT
    )
    date_joined_company = models.DateField(null=True, blank=True)

    # Payroll Information
    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text='Hourly rate in KES. Employees without a rate are blocked from payroll runs.'
    )
    is_on_payroll = models.BooleanField(
        default=True,
        help_text='Include in payroll runs. Off for administrator and reviewer accounts.'
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    objects = UserManager()

    class Meta:
        ordering = ['first_name', 'last_name']
        verbose_name = 'Employee'
        verbose_name_plural = 'Employees'

    def __str__(self):
        return f"{self.get_full_name()} ({self.email})"

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip() or self.email

    @property
    def department_name(self):
        return self.department.name if self.department else ''

    @property
    def is_payable(self):
        return (
            self.is_active
            and self.is_on_payroll
            and self.employment_status == self.EmploymentStatus.ACTIVE
        )


class EmployeeDeduction(BaseModel):
    """
    Recurring variable deductions for employees (loans, advances, SACCO, etc.).
    Statutory deductions (PAYE, NSSF, SHIF, Housing Levy) are calculated automatically
    and EWA advances are tracked separately in the ewa app.
    """

    class DeductionType(models.TextChoices):
        LOAN = 'loan', 'Loan Repayment'
        ADVANCE = 'advance', 'Employer Advance'
        SACCO = 'sacco', 'SACCO Contribution'
        INSURANCE = 'insurance', 'Insurance Premium'
        OTHER = 'other', 'Other Deduction'

    # Types that repay a balance owed to the employer or a lender
    LOAN_TYPES = (DeductionType.LOAN, DeductionType.ADVANCE)

    employee = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='deductions'
    )
    deduction_type = models.CharField(
        max_length=20,
        choices=DeductionType.choices
    )
    name = models.CharField(max_length=100)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    effective_from = models.DateField()
    effective_to = models.DateField(null=True, blank=True)
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text='Total loan/advance amount (for tracking balance)'
    )
    balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text='Remaining balance'
    )

    class Meta:
        ordering = ['employee', 'deduction_type']

    def __str__(self):
        return f"{self.employee.get_full_name()} - {self.name}: {self.amount}"

    @property
    def is_loan(self):
        return self.deduction_type in self.LOAN_TYPES

    def period_amount(self):
        """Amount due this period; loan repayments never exceed the remaining balance."""
        if self.balance is not None:
            return max(min(self.amount, self.balance), 0)
        return self.amount
