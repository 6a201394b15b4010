from django.urls import path

from . import views

app_name = "payments"

urlpatterns = [
    path("payments/", views.PaymentListView.as_view(), name="list"),
    path("payments/daily-summary/", views.DailySummaryView.as_view(), name="daily-summary"),
    path("payments/export/", views.PaymentExportView.as_view(), name="export"),
    path("payments/<int:payment_id>/", views.PaymentDetailView.as_view(), name="detail"),
]
