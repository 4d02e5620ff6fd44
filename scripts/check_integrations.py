"""Run connectivity checks against the OpenAI, weather and remote store providers."""

from __future__ import annotations

import asyncio
from typing import Iterable

from mylook.integrations import IntegrationCheckResult, run_all_checks
from mylook.monitoring.logging import configure_logging


def _format_result(result: IntegrationCheckResult) -> str:
    status = "OK  " if result.success else "FAIL"
    return f"[{status}] {result.name}: {result.message}"


def print_results(results: Iterable[IntegrationCheckResult]) -> int:
    failures = 0
    for result in results:
        print(_format_result(result))
        failures += 0 if result.success else 1
    return failures


def main() -> None:
    configure_logging()
    results = asyncio.run(run_all_checks())
    raise SystemExit(1 if print_results(results) else 0)


if __name__ == "__main__":
    main()
