"""
Recovery chain for insight-extraction replies.

Models are asked for a strict JSON array of ``{"text", "relevance"}`` objects
but often answer with fenced, single-quoted or unbracketed JSON, or plain
prose. Parsing goes through three stages:

1. parse the reply as-is
2. strip code fences and a ``json`` tag, normalize quotes, wrap a bare
   object or an unbracketed list in ``[...]``, parse again
3. treat every non-empty line of the raw reply as one insight

The chain never raises.
"""

import json
from typing import Any

from contextmem.models.document import Insight
from contextmem.utils.exceptions import ParseError
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_RELEVANCE = 0.8


def _to_insights(data: Any) -> list[Insight]:
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ParseError("Insight reply is not a JSON array", context={"type": type(data).__name__})

    insights = []
    for item in data:
        if not isinstance(item, dict) or "text" not in item or "relevance" not in item:
            raise ParseError("Insight object must have text and relevance")
        try:
            insights.append(Insight(text=str(item["text"]), relevance=float(item["relevance"])))
        except (TypeError, ValueError) as e:
            raise ParseError(f"Invalid insight object: {e}") from e
    return insights


def parse_strict(response: str) -> list[Insight]:
    """
    Stage 1: parse the reply exactly as given.

    Raises:
        ParseError: If the reply is not a JSON insight array
    """
    try:
        return _to_insights(json.loads(response))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e


def clean_response(response: str) -> str:
    """Strip fences and a leading json tag, then normalize single quotes."""
    cleaned = response.strip().strip("`").strip()
    for tag in ("json", "JSON"):
        if cleaned.startswith(tag):
            cleaned = cleaned[len(tag) :]
    return cleaned.replace("'", '"').strip()


def parse_repaired(response: str) -> list[Insight]:
    """
    Stage 2: clean the reply and wrap it in brackets when needed.

    Raises:
        ParseError: If the repaired reply still does not parse
    """
    cleaned = clean_response(response)
    if (cleaned.startswith("{") and cleaned.endswith("}")) or not cleaned.startswith("["):
        cleaned = f"[{cleaned}]"
    return parse_strict(cleaned)


def parse_lines(response: str, relevance: float = DEFAULT_RELEVANCE) -> list[Insight]:
    """Stage 3: one insight per non-empty line."""
    return [
        Insight(text=line.strip(), relevance=relevance)
        for line in response.splitlines()
        if line.strip()
    ]


def parse_insights(response: str, fallback_relevance: float = DEFAULT_RELEVANCE) -> list[Insight]:
    """
    Parse an insight-extraction reply through the full recovery chain.

    Args:
        response: Raw completion text
        fallback_relevance: Relevance given to line-fallback insights

    Returns:
        Parsed insights (possibly empty)
    """
    for stage in (parse_strict, parse_repaired):
        try:
            return stage(response)
        except ParseError as e:
            logger.debug(f"Insight parse stage {stage.__name__} failed: {e}")

    logger.warning(
        "Insight reply is not JSON, falling back to one insight per line",
        extra={"response_length": len(response)},
    )
    return parse_lines(response, fallback_relevance)
