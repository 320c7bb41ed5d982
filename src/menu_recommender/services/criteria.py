"""Resolve natural-language queries into structured criteria.

Resolution has two states. ATTEMPT hands the query (and any previous
criteria from the conversation) to the language-understanding client under a
timeout. Any failure there moves to FALLBACK, which tokenizes the query into
keywords that must each match the vendor, item name or an ingredient. The
fallback does not look at previous criteria.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from menu_recommender.domain.criteria import (
    NUTRIENT_FIELDS,
    Criteria,
    Fallback,
    Resolution,
    Resolved,
    SortDirective,
)
from menu_recommender.domain.errors import ValidationError
from menu_recommender.services.cache import Cache
from menu_recommender.services.compiler import compile_criteria

_logger = logging.getLogger(__name__)

_BOUNDS_SCHEMA: dict[str, object] = {
    "anyOf": [
        {"type": "null"},
        {
            "type": "object",
            "properties": {
                "min": {"anyOf": [{"type": "number"}, {"type": "null"}]},
                "max": {"anyOf": [{"type": "number"}, {"type": "null"}]},
            },
            "required": ["min", "max"],
            "additionalProperties": False,
        },
    ]
}

CRITERIA_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        **{name: _BOUNDS_SCHEMA for name in NUTRIENT_FIELDS},
        "item": {
            "anyOf": [
                {"type": "null"},
                {
                    "type": "object",
                    "properties": {"name": {"type": "string"}},
                    "required": ["name"],
                    "additionalProperties": False,
                },
            ]
        },
        "sort": {
            "anyOf": [
                {"type": "null"},
                {"type": "string", "enum": [s.value for s in SortDirective]},
            ]
        },
    },
    "required": [*NUTRIENT_FIELDS, "item", "sort"],
    "additionalProperties": False,
}

_INSTRUCTIONS = (
    "You translate fast-food requests into search criteria. "
    "Nutrient fields ({fields}) take an object with optional numeric "
    "min and max bounds; use null for nutrients the user did not mention. "
    "Calories are kcal, sodium and cholesterol are mg, everything else is grams. "
    "Set item.name only when the user names a specific dish. "
    "Use sort only for relative price requests: price_asc for cheaper options, "
    "price_desc for more expensive ones; otherwise sort is null."
)


class LanguageClient(Protocol):
    """Interface for the language-understanding collaborator."""

    async def parse(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return structured criteria for the prompt."""


@dataclass
class CriteriaResolver:
    """Turns user queries into criteria, with a keyword fallback."""

    client: LanguageClient | None
    model: str
    reasoning_effort: str | None = None
    store: bool = False
    timeout_seconds: float = 8.0
    cache: Cache | None = None
    cache_ttl_seconds: int = 600

    async def resolve(
        self,
        query: object,
        previous_criteria: Criteria | Mapping[str, object] | None = None,
    ) -> Resolution:
        """Resolve a query; never raises for collaborator failures."""
        text = validate_query(query)
        criteria = await self._attempt(text, previous_criteria)
        if criteria is None:
            return fallback_resolution(text)
        return Resolved(criteria=criteria, filter=compile_criteria(criteria).predicate)

    async def _attempt(
        self,
        query: str,
        previous_criteria: Criteria | Mapping[str, object] | None,
    ) -> Criteria | None:
        if self.client is None:
            _logger.info("Language service not configured, using keyword search")
            return None

        cache_key = _cache_key(query, previous_criteria)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if isinstance(cached, Criteria):
                return cached

        prompt = build_prompt(query, previous_criteria)
        try:
            async with asyncio.timeout(self.timeout_seconds):
                raw = await self.client.parse(
                    model=self.model,
                    reasoning_effort=self.reasoning_effort,
                    store=self.store,
                    prompt=prompt,
                    schema=CRITERIA_SCHEMA,
                )
            criteria = Criteria.from_mapping(raw)
        except Exception as exc:  # noqa: BLE001
            _logger.warning(
                "Criteria parsing failed, falling back to keyword search: %r", exc
            )
            return None

        if self.cache is not None:
            self.cache.set(cache_key, criteria, ttl_seconds=self.cache_ttl_seconds)
        return criteria


def validate_query(query: object) -> str:
    """Return the stripped query or raise ValidationError."""
    if not isinstance(query, str) or not query.strip():
        raise ValidationError("Query parameter is required and must be a string")
    return query.strip()


def tokenize_keywords(query: str) -> tuple[str, ...]:
    """Case-fold and split a query on whitespace, dropping repeats."""
    return tuple(dict.fromkeys(query.casefold().split()))


def fallback_resolution(query: str) -> Fallback:
    """Build keyword criteria for a query without language understanding."""
    criteria = Criteria(keywords=tokenize_keywords(query))
    return Fallback(criteria=criteria, filter=compile_criteria(criteria).predicate)


def build_prompt(
    query: str,
    previous_criteria: Criteria | Mapping[str, object] | None = None,
) -> str:
    """Build the language-service prompt, with refinement context if any."""
    instructions = _INSTRUCTIONS.format(fields=", ".join(NUTRIENT_FIELDS))
    previous = _previous_json(previous_criteria)
    if previous is None:
        return f"{instructions}\n\nUser request: {query}"
    context = (
        "This prompt is a refinement of a previous search. "
        f"Previous criteria: {previous}. "
        "Return the full updated criteria: merge the previous criteria with the "
        "new request, keep every previous constraint the user did not change, "
        "and express relative requests such as 'cheaper' through sort."
    )
    return f"{instructions}\n\n{context}\n\nUser request: {query}"


def _previous_json(
    previous_criteria: Criteria | Mapping[str, object] | None,
) -> str | None:
    if not isinstance(previous_criteria, Criteria | Mapping):
        return None
    payload = (
        previous_criteria.to_mapping()
        if isinstance(previous_criteria, Criteria)
        else dict(previous_criteria)
    )
    if not payload:
        return None
    return json.dumps(payload, sort_keys=True, default=str)


def _cache_key(
    query: str, previous_criteria: Criteria | Mapping[str, object] | None
) -> str:
    return f"criteria:{query.casefold()}:{_previous_json(previous_criteria) or ''}"
