"""Outfit suggestion, photo analysis and acceptance."""

from .acceptance import accept_suggestion, summarize_context
from .engine import AiConfig, SuggestionParams, fallback_suggestion, generate_suggestion

__all__ = [
    "AiConfig",
    "SuggestionParams",
    "accept_suggestion",
    "fallback_suggestion",
    "generate_suggestion",
    "summarize_context",
]
