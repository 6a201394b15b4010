from __future__ import annotations

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Payment


@receiver(post_save, sender=Payment)
def refresh_balance_on_save(sender, instance: Payment, **kwargs) -> None:
    instance.order.refresh_pending_balance()


@receiver(post_delete, sender=Payment)
def refresh_balance_on_delete(sender, instance: Payment, **kwargs) -> None:
    instance.order.refresh_pending_balance()
