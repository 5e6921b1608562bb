from django.contrib import admin
from .models import PayrollPeriod, PayrollEntry, TaxTable


class PayrollEntryInline(admin.TabularInline):
    model = PayrollEntry
    extra = 0
    readonly_fields = [
        'employee', 'hours_worked', 'gross_pay', 'paye', 'nssf', 'shif', 'housing_levy',
        'ewa_deductions', 'net_pay', 'status', 'is_edited'
    ]
    fields = readonly_fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PayrollPeriod)
class PayrollPeriodAdmin(admin.ModelAdmin):
    list_display = ['name', 'start_date', 'end_date', 'status', 'employee_count', 'total_gross', 'total_net', 'finalized_by', 'finalized_at']
    list_filter = ['status']
    search_fields = ['name']
    date_hierarchy = 'end_date'
    readonly_fields = [
        'employee_count', 'total_gross', 'total_deductions', 'total_net', 'total_ewa',
        'total_paye', 'total_nssf', 'total_shif', 'total_housing_levy',
        'finalized_by', 'finalized_at'
    ]
    inlines = [PayrollEntryInline]

    fieldsets = (
        (None, {'fields': ('start_date', 'end_date', 'name', 'status')}),
        ('Totals', {
            'fields': (
                'employee_count', 'total_gross', 'total_deductions', 'total_net', 'total_ewa',
                'total_paye', 'total_nssf', 'total_shif', 'total_housing_levy'
            ),
            'classes': ('collapse',)
        }),
        ('Finalization', {
            'fields': ('finalized_by', 'finalized_at', 'note'),
        }),
    )


@admin.register(PayrollEntry)
class PayrollEntryAdmin(admin.ModelAdmin):
    list_display = ['employee', 'payroll_period', 'department', 'gross_pay', 'total_deductions', 'net_pay', 'status', 'is_edited']
    list_filter = ['payroll_period', 'status', 'is_edited', 'department']
    search_fields = ['employee__first_name', 'employee__last_name', 'employee__email', 'employee_number']
    raw_id_fields = ['employee', 'payroll_period']

    fieldsets = (
        (None, {'fields': ('payroll_period', 'employee', 'employee_number', 'department', 'position')}),
        ('Earnings', {
            'fields': ('hours_worked', 'overtime_hours', 'hourly_rate', 'gross_pay')
        }),
        ('Statutory Deductions', {
            'fields': ('taxable_income', 'paye', 'nssf', 'shif', 'housing_levy')
        }),
        ('Other Deductions', {
            'fields': ('ewa_deductions', 'loan_deductions', 'other_deductions')
        }),
        ('Net Pay', {
            'fields': ('total_deductions', 'net_pay')
        }),
        ('Review', {
            'fields': ('status', 'status_reason', 'is_edited', 'original_net_pay')
        }),
    )


@admin.register(TaxTable)
class TaxTableAdmin(admin.ModelAdmin):
    list_display = ['effective_from', 'effective_to', 'is_active', 'personal_relief', 'shif_rate', 'housing_levy_rate']
    list_filter = ['is_active']

    fieldsets = (
        (None, {'fields': ('effective_from', 'effective_to', 'is_active')}),
        ('PAYE Tax Bands', {
            'fields': (
                ('band_1_limit', 'band_1_rate'),
                ('band_2_limit', 'band_2_rate'),
                ('band_3_limit', 'band_3_rate'),
                ('band_4_limit', 'band_4_rate'),
                'band_5_rate'
            )
        }),
        ('Reliefs', {
            'fields': ('personal_relief',)
        }),
        ('NSSF', {
            'fields': (
                ('nssf_lower_limit', 'nssf_minimum'),
                ('nssf_upper_limit', 'nssf_maximum'),
                'nssf_rate'
            )
        }),
        ('Other Statutory', {
            'fields': ('shif_rate', 'housing_levy_rate')
        }),
    )
