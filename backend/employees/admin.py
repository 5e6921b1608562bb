from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Department, EmployeeDeduction


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'created_at']
    search_fields = ['name', 'code']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['email', 'employee_number', 'first_name', 'last_name', 'department', 'hourly_rate', 'employment_status', 'is_active']
    list_filter = ['employment_status', 'employment_type', 'department', 'is_on_payroll', 'is_active']
    search_fields = ['email', 'first_name', 'last_name', 'employee_number', 'kra_pin']
    ordering = ['first_name', 'last_name']

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal Info', {'fields': ('first_name', 'last_name', 'phone_number', 'national_id')}),
        ('Employment', {
            'fields': (
                'employee_number', 'department', 'position',
                'employment_status', 'employment_type', 'date_joined_company',
            )
        }),
        ('Statutory', {'fields': ('kra_pin', 'nssf_number', 'shif_number')}),
        ('Payroll', {'fields': ('hourly_rate', 'is_on_payroll')}),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',)
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'password1', 'password2'),
        }),
    )


@admin.register(EmployeeDeduction)
class EmployeeDeductionAdmin(admin.ModelAdmin):
    list_display = ['employee', 'deduction_type', 'name', 'amount', 'balance', 'effective_from', 'effective_to']
    list_filter = ['deduction_type']
    search_fields = ['employee__first_name', 'employee__last_name', 'name']
    raw_id_fields = ['employee']
