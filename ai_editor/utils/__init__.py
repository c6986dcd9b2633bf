"""
Utility modules for the AI repository editor.
"""

from ai_editor.utils.logging import (
    get_logger,
    setup_logging,
    log_edit_result,
    log_api_call,
    log_error_with_context,
)
from ai_editor.utils.resilience import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    ErrorRecoveryManager,
    retry_with_backoff,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_edit_result",
    "log_api_call",
    "log_error_with_context",
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "ErrorRecoveryManager",
    "retry_with_backoff",
]
