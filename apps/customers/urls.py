"""
Customer URL configuration.
"""

from django.urls import path

from apps.customers.views import CustomerDetailView, CustomerListView

urlpatterns = [
    path('customers', CustomerListView.as_view(), name='customer-list'),
    path(
        'customers/<int:customer_id>',
        CustomerDetailView.as_view(),
        name='customer-detail',
    ),
]
