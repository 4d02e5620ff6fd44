"""Tests for external integration connectivity helpers."""

from __future__ import annotations

import pytest
import pytest_mock

from mylook.integrations.checks import check_openai, check_remote, check_weather, run_all_checks


@pytest.fixture(autouse=True)
def _setup_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_BASE_URL", "https://ai.test/v1")
    monkeypatch.setenv("MYLOOK_REMOTE_BACKEND", "none")


@pytest.mark.asyncio
async def test_check_openai_success(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("mylook.integrations.checks.OpenAIClient", autospec=True)
    instance = client_mock.return_value
    instance.ping = mocker.AsyncMock(return_value=True)
    instance.close = mocker.AsyncMock(return_value=None)

    result = await check_openai()

    assert result.success
    instance.ping.assert_awaited_once_with("sk-test")
    instance.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_check_openai_without_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "")

    result = await check_openai()

    assert not result.success
    assert "OPENAI_API_KEY" in result.message


@pytest.mark.asyncio
async def test_check_weather_failure(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("mylook.integrations.checks.GeoWeatherClient", autospec=True)
    instance = client_mock.return_value
    instance.ping = mocker.AsyncMock(return_value=False)
    instance.close = mocker.AsyncMock(return_value=None)

    result = await check_weather()

    assert not result.success
    assert "non-success" in result.message.lower()
    instance.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_check_remote_reports_exception_message(mocker: pytest_mock.MockerFixture) -> None:
    store = mocker.Mock()
    store.ping = mocker.AsyncMock(side_effect=RuntimeError("connection refused"))
    store.close = mocker.AsyncMock(return_value=None)
    mocker.patch("mylook.integrations.checks.build_remote_store", return_value=store)

    result = await check_remote()

    assert not result.success
    assert result.message == "connection refused"
    store.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_all_checks_returns_every_result(mocker: pytest_mock.MockerFixture) -> None:
    for name in ("OpenAIClient", "GeoWeatherClient"):
        instance = mocker.patch(f"mylook.integrations.checks.{name}", autospec=True).return_value
        instance.ping = mocker.AsyncMock(return_value=True)
        instance.close = mocker.AsyncMock(return_value=None)

    results = await run_all_checks()

    assert [result.name for result in results] == ["OpenAI", "Open-Meteo", "Remote store"]
    assert all(result.success for result in results)
