from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Pagos"

    def ready(self) -> None:
        from . import signals  # noqa: F401
