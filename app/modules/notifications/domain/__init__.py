from .email_service import EmailService
from .report import ScanNotifier, build_report_body

__all__ = [
    "EmailService",
    "ScanNotifier",
    "build_report_body",
]
