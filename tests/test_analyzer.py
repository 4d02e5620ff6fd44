"""Tests for photo attribute detection."""

from __future__ import annotations

import pytest
import pytest_mock

from mylook.errors import NetworkFailure, ParseFailure, PreconditionFailure
from mylook.models import Category, Season
from mylook.suggestion.analyzer import analyze_item_photo
from mylook.suggestion.engine import AiConfig

PHOTO = "data:image/jpeg;base64,bm90LWFuLWltYWdl"
CONFIG = AiConfig(api_key="sk-test", model="gpt-4.1-mini", fallback_models=("gpt-4.1",))


@pytest.mark.asyncio
async def test_requires_api_key(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.create_response = mocker.AsyncMock()

    with pytest.raises(PreconditionFailure):
        await analyze_item_photo(PHOTO, AiConfig(), client=client)

    client.create_response.assert_not_awaited()


@pytest.mark.asyncio
async def test_first_model_answer_wins(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.create_response = mocker.AsyncMock(
        return_value='{"name": "Wool coat", "category": "outerwear", "styleTags": ["warm"], "season": "winter"}',
    )

    analysis = await analyze_item_photo(PHOTO, CONFIG, client=client)

    assert analysis.name == "Wool coat"
    assert analysis.category is Category.OUTERWEAR
    assert analysis.season is Season.WINTER
    assert analysis.style_tags == ["warm"]
    client.create_response.assert_awaited_once()
    request = client.create_response.await_args.kwargs["input"]
    assert request[0]["content"][1] == {"type": "input_image", "image_url": PHOTO}


@pytest.mark.asyncio
async def test_falls_through_to_next_model(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.create_response = mocker.AsyncMock(
        side_effect=[NetworkFailure("model not found", status_code=404), '{"name": "Sneakers", "category": "shoes"}'],
    )

    analysis = await analyze_item_photo(PHOTO, CONFIG, client=client)

    assert analysis.category is Category.SHOES
    models = [call.kwargs["model"] for call in client.create_response.await_args_list]
    assert models == ["gpt-4.1-mini", "gpt-4.1"]


@pytest.mark.asyncio
async def test_raises_last_error_when_every_model_fails(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.create_response = mocker.AsyncMock(side_effect=[NetworkFailure("down"), "not json"])

    with pytest.raises(ParseFailure):
        await analyze_item_photo(PHOTO, CONFIG, client=client)
