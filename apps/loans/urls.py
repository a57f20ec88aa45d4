"""
Loan URL configuration.
"""

from django.urls import path

from apps.loans.views import (
    ApproveLoanView,
    DashboardView,
    DisburseLoanView,
    EMICalculatorView,
    LoanDetailView,
    LoanListView,
    RejectLoanView,
)

urlpatterns = [
    path('loans', LoanListView.as_view(), name='loan-list'),
    path('loans/<int:loan_id>', LoanDetailView.as_view(), name='loan-detail'),
    path(
        'loans/<int:loan_id>/approve',
        ApproveLoanView.as_view(),
        name='loan-approve',
    ),
    path(
        'loans/<int:loan_id>/reject',
        RejectLoanView.as_view(),
        name='loan-reject',
    ),
    path(
        'loans/<int:loan_id>/disburse',
        DisburseLoanView.as_view(),
        name='loan-disburse',
    ),
    path('emi-calculator', EMICalculatorView.as_view(), name='emi-calculator'),
    path('dashboard', DashboardView.as_view(), name='dashboard'),
]
