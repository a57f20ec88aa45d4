from django.contrib import admin

from apps.payments.models import Receipt


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = (
        'receipt_id', 'loan', 'customer', 'emi_number',
        'amount', 'payment_date', 'payment_method',
    )
    list_filter = ('payment_method', 'payment_date')
    search_fields = ('receipt_id', 'customer__name')
    readonly_fields = ('created_at',)
    raw_id_fields = ('loan', 'customer')
