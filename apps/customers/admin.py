from django.contrib import admin

from apps.customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'name', 'mobile', 'email', 'pan',
        'guarantor_name', 'status', 'created_at',
    )
    list_filter = ('status', 'created_at')
    search_fields = ('name', 'mobile', 'aadhaar', 'pan')
    readonly_fields = ('created_at', 'updated_at')
