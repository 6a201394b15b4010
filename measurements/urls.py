from django.urls import path

from . import views

app_name = "measurements"

urlpatterns = [
    path("measurements/", views.MeasurementListView.as_view(), name="list"),
    path("measurements/<int:measurement_id>/", views.MeasurementDetailView.as_view(), name="detail"),
    path("measurements/<int:measurement_id>/versions/", views.MeasurementVersionView.as_view(), name="new-version"),
    path("clients/<int:client_id>/measurements/", views.ClientMeasurementsView.as_view(), name="by-client"),
]
