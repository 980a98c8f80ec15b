"""Observability utilities (error log file, redaction)."""

from statusbot.observability.error_log_file import log_job_error, setup_error_log_file
from statusbot.observability.redaction import mask_secret, redact_text

__all__ = [
    "log_job_error",
    "mask_secret",
    "redact_text",
    "setup_error_log_file",
]
