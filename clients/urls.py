from django.urls import path

from . import views

app_name = "clients"

urlpatterns = [
    path("clients/", views.ClientListView.as_view(), name="list"),
    path("clients/<int:client_id>/", views.ClientDetailView.as_view(), name="detail"),
    path("clients/<int:client_id>/deactivate/", views.ClientDeactivateView.as_view(), name="deactivate"),
    path("clients/<int:client_id>/reactivate/", views.ClientReactivateView.as_view(), name="reactivate"),
    path("clients/<int:client_id>/statistics/", views.ClientStatisticsView.as_view(), name="statistics"),
]
