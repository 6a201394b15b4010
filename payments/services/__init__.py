from .exports import build_payments_workbook
from .payments import OverpaymentConfirmationRequired, PaymentDraft, PaymentService

__all__ = [
    "OverpaymentConfirmationRequired",
    "PaymentDraft",
    "PaymentService",
    "build_payments_workbook",
]
