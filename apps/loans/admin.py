from django.contrib import admin

from apps.loans.models import Loan


@admin.register(Loan)
class LoanAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'customer', 'amount', 'tenure',
        'interest_rate', 'emi', 'processing_fee',
        'status', 'application_date', 'disbursal_date',
    )
    list_filter = ('status', 'application_date', 'disbursal_date')
    search_fields = ('customer__name', 'customer__mobile')
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('customer',)
