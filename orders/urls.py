from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("orders/", views.OrderListView.as_view(), name="list"),
    path("orders/statistics/", views.OrderStatisticsView.as_view(), name="statistics"),
    path("orders/<int:order_id>/", views.OrderDetailView.as_view(), name="detail"),
    path("orders/<int:order_id>/state/", views.OrderStateView.as_view(), name="state"),
    path("orders/<int:order_id>/advance/", views.OrderAdvanceView.as_view(), name="advance"),
    path("orders/<int:order_id>/abandon/", views.OrderAbandonView.as_view(), name="abandon"),
]
