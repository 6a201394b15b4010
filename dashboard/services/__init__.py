from .dashboard import DashboardService

__all__ = ["DashboardService"]
