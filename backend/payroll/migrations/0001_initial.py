import django.db.models.deletion
import uuid
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PayrollPeriod",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("name", models.CharField(blank=True, max_length=50)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("finalized", "Finalized")], default="draft", max_length=20)),
                ("finalized_at", models.DateTimeField(blank=True, null=True)),
                ("note", models.TextField(blank=True)),
                ("employee_count", models.IntegerField(default=0)),
                ("total_gross", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_deductions", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_net", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_ewa", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_paye", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_nssf", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_shif", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_housing_levy", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_created", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_updated", to=settings.AUTH_USER_MODEL)),
                ("finalized_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="payroll_finalized", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-end_date"],
                "unique_together": {("start_date", "end_date")},
            },
        ),
        migrations.CreateModel(
            name="PayrollEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("employee_number", models.CharField(blank=True, max_length=20)),
                ("department", models.CharField(blank=True, max_length=100)),
                ("position", models.CharField(blank=True, max_length=100)),
                ("hours_worked", models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ("overtime_hours", models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ("hourly_rate", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("gross_pay", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("taxable_income", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("paye", models.DecimalField(decimal_places=2, default=0, help_text="Pay As You Earn tax after personal relief", max_digits=12)),
                ("nssf", models.DecimalField(decimal_places=2, default=0, help_text="NSSF pension contribution (tiered, capped)", max_digits=12)),
                ("shif", models.DecimalField(decimal_places=2, default=0, help_text="Social Health Insurance Fund (2.75% of gross)", max_digits=12)),
                ("housing_levy", models.DecimalField(decimal_places=2, default=0, help_text="Affordable Housing Levy (1.5% of gross)", max_digits=12)),
                ("ewa_deductions", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("loan_deductions", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("other_deductions", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("total_deductions", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("net_pay", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("status", models.CharField(choices=[("complete", "Complete"), ("warning", "Warning"), ("error", "Error")], default="complete", max_length=10)),
                ("status_reason", models.CharField(blank=True, max_length=255)),
                ("is_edited", models.BooleanField(default=False)),
                ("original_net_pay", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_created", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_updated", to=settings.AUTH_USER_MODEL)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payroll_entries", to=settings.AUTH_USER_MODEL)),
                ("payroll_period", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="entries", to="payroll.payrollperiod")),
            ],
            options={
                "verbose_name_plural": "Payroll Entries",
                "ordering": ["employee__first_name", "employee__last_name"],
                "unique_together": {("payroll_period", "employee")},
            },
        ),
        migrations.CreateModel(
            name="TaxTable",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("effective_from", models.DateField()),
                ("effective_to", models.DateField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("band_1_limit", models.DecimalField(decimal_places=2, default=24000, help_text="Upper limit for 10% band", max_digits=12)),
                ("band_1_rate", models.DecimalField(decimal_places=4, default=Decimal("0.10"), max_digits=5)),
                ("band_2_limit", models.DecimalField(decimal_places=2, default=32333, help_text="Upper limit for 25% band", max_digits=12)),
                ("band_2_rate", models.DecimalField(decimal_places=4, default=Decimal("0.25"), max_digits=5)),
                ("band_3_limit", models.DecimalField(decimal_places=2, default=500000, help_text="Upper limit for 30% band", max_digits=12)),
                ("band_3_rate", models.DecimalField(decimal_places=4, default=Decimal("0.30"), max_digits=5)),
                ("band_4_limit", models.DecimalField(decimal_places=2, default=800000, help_text="Upper limit for 32.5% band", max_digits=12)),
                ("band_4_rate", models.DecimalField(decimal_places=4, default=Decimal("0.325"), max_digits=5)),
                ("band_5_rate", models.DecimalField(decimal_places=4, default=Decimal("0.35"), help_text="Rate for income above band 4", max_digits=5)),
                ("personal_relief", models.DecimalField(decimal_places=2, default=2400, max_digits=12)),
                ("nssf_lower_limit", models.DecimalField(decimal_places=2, default=8000, help_text="Gross pay up to which the fixed minimum applies", max_digits=12)),
                ("nssf_minimum", models.DecimalField(decimal_places=2, default=480, max_digits=12)),
                ("nssf_rate", models.DecimalField(decimal_places=4, default=Decimal("0.06"), max_digits=5)),
                ("nssf_upper_limit", models.DecimalField(decimal_places=2, default=72000, max_digits=12)),
                ("nssf_maximum", models.DecimalField(decimal_places=2, default=4320, max_digits=12)),
                ("shif_rate", models.DecimalField(decimal_places=4, default=Decimal("0.0275"), max_digits=5)),
                ("housing_levy_rate", models.DecimalField(decimal_places=4, default=Decimal("0.015"), max_digits=5)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_created", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_updated", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-effective_from"],
            },
        ),
    ]
