"""Detect garment attributes from a photo using the AI backend."""

from __future__ import annotations

import asyncio
import logging

from mylook.clients.openai_client import OpenAIClient
from mylook.errors import MyLookError, NetworkFailure, ParseFailure, PreconditionFailure
from mylook.imgproc.normalize import ImageNormalizer
from mylook.suggestion.decoding import Err, ItemAnalysis, decode_item_analysis
from mylook.suggestion.engine import AiConfig

logger = logging.getLogger(__name__)

ANALYSIS_INSTRUCTION = (
    "Analyze this clothing image and return only JSON with this shape: "
    '{"name":"...","category":"tops|bottoms|outerwear|dresses|shoes|accessories",'
    '"styleTags":["..."],"season":"all|spring|summer|autumn|winter","reason":"..."}'
)


async def analyze_item_photo(
    image_data: str,
    ai_config: AiConfig,
    *,
    client: OpenAIClient,
    normalizer: ImageNormalizer | None = None,
    max_output_tokens: int = 300,
) -> ItemAnalysis:
    """
    Return sanitised attributes for the garment in ``image_data``.

    Models from ``ai_config.backends()`` are tried in order and the first
    decodable answer wins. Raises the last failure when none succeeds.
    """

    if not ai_config.enabled:
        raise PreconditionFailure("Add OpenAI API key in Settings first.")

    normalizer = normalizer or ImageNormalizer()
    resized = await asyncio.to_thread(normalizer.resize_data_url, image_data)
    request = [
        {
            "role": "user",
            "content": [
                {"type": "input_text", "text": ANALYSIS_INSTRUCTION},
                {"type": "input_image", "image_url": resized},
            ],
        },
    ]

    last_error: MyLookError | None = None
    for model in ai_config.backends():
        try:
            text = await client.create_response(
                api_key=ai_config.api_key,
                model=model,
                input=request,
                max_output_tokens=max_output_tokens,
            )
        except NetworkFailure as exc:
            logger.warning("Photo analysis with %s failed: %s", model, exc)
            last_error = exc
            continue
        decoded = decode_item_analysis(text)
        if isinstance(decoded, Err):
            logger.warning("Photo analysis with %s was not decodable: %s", model, decoded.error)
            last_error = decoded.error
            continue
        return decoded.value

    raise last_error or ParseFailure("No analysis result")
