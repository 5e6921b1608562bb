import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import employees.models
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="Department",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("code", models.CharField(max_length=10, unique=True)),
                ("description", models.TextField(blank=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="User",
            fields=[
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("email", models.EmailField(max_length=254, unique=True, verbose_name="email address")),
                ("employee_number", models.CharField(blank=True, max_length=20, null=True, unique=True)),
                ("phone_number", models.CharField(blank=True, max_length=15, validators=[django.core.validators.RegexValidator(message="Phone number must be in format: '+254712345678'", regex="^\\+?254?\\d{9,12}$")])),
                ("national_id", models.CharField(blank=True, max_length=20)),
                ("kra_pin", models.CharField(blank=True, help_text="KRA PIN (e.g., A012345678Z)", max_length=11)),
                ("nssf_number", models.CharField(blank=True, max_length=20)),
                ("shif_number", models.CharField(blank=True, max_length=20)),
                ("position", models.CharField(blank=True, max_length=100)),
                ("employment_status", models.CharField(choices=[("active", "Active"), ("on_leave", "On Leave"), ("suspended", "Suspended"), ("terminated", "Terminated"), ("resigned", "Resigned")], default="active", max_length=20)),
                ("employment_type", models.CharField(choices=[("permanent", "Permanent"), ("contract", "Contract"), ("casual", "Casual"), ("intern", "Intern")], default="permanent", max_length=20)),
                ("date_joined_company", models.DateField(blank=True, null=True)),
                ("hourly_rate", models.DecimalField(blank=True, decimal_places=2, help_text="Hourly rate in KES. Employees without a rate are blocked from payroll runs.", max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ("is_on_payroll", models.BooleanField(default=True, help_text="Include in payroll runs. Off for administrator and reviewer accounts.")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_created", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_updated", to=settings.AUTH_USER_MODEL)),
                ("department", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="employees", to="employees.department")),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "Employee",
                "verbose_name_plural": "Employees",
                "ordering": ["first_name", "last_name"],
            },
            managers=[
                ("objects", employees.models.UserManager()),
            ],
        ),
        migrations.AddField(
            model_name="department",
            name="created_by",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_created", to=settings.AUTH_USER_MODEL),
        ),
        migrations.AddField(
            model_name="department",
            name="updated_by",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_updated", to=settings.AUTH_USER_MODEL),
        ),
        migrations.CreateModel(
            name="EmployeeDeduction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deduction_type", models.CharField(choices=[("loan", "Loan Repayment"), ("advance", "Employer Advance"), ("sacco", "SACCO Contribution"), ("insurance", "Insurance Premium"), ("other", "Other Deduction")], max_length=20)),
                ("name", models.CharField(max_length=100)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("effective_from", models.DateField()),
                ("effective_to", models.DateField(blank=True, null=True)),
                ("total_amount", models.DecimalField(blank=True, decimal_places=2, help_text="Total loan/advance amount (for tracking balance)", max_digits=12, null=True)),
                ("balance", models.DecimalField(blank=True, decimal_places=2, help_text="Remaining balance", max_digits=12, null=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_created", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="%(class)s_updated", to=settings.AUTH_USER_MODEL)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="deductions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["employee", "deduction_type"],
            },
        ),
    ]
