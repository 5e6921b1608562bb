from django.contrib import admin
from .models import EwaAdvance


@admin.register(EwaAdvance)
class EwaAdvanceAdmin(admin.ModelAdmin):
    list_display = ['employee', 'amount', 'status', 'requested_at', 'disbursed_at']
    list_filter = ['status']
    search_fields = ['employee__first_name', 'employee__last_name', 'employee__email']
    raw_id_fields = ['employee']
