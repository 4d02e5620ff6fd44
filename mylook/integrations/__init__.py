"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_openai,
    check_remote,
    check_weather,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_openai",
    "check_remote",
    "check_weather",
    "run_all_checks",
]
