from .clients import ClientService, DuplicatePhoneError, HasActiveBalanceError

__all__ = [
    "ClientService",
    "DuplicatePhoneError",
    "HasActiveBalanceError",
]
