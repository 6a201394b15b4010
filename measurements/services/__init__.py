from .measurements import MeasurementComparison, MeasurementDraft, MeasurementService

__all__ = [
    "MeasurementComparison",
    "MeasurementDraft",
    "MeasurementService",
]
