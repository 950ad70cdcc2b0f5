"""Application services."""

from .access_control import build_access_control_service
from .audit import AccessLogService

__all__ = ["AccessLogService", "build_access_control_service"]
