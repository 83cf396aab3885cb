"""Seam for the natural-language collaborator.

The engine never calls a text generator. Callers hand the structured
analysis document to one (an LLM client, a template renderer) and attach the
returned strings to whatever they display.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pydantic import BaseModel, Field

from goalkernel.engine.models import ProgressAnalysis

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def generate(self, document: dict[str, Any]) -> list[str]: ...


class Narration(BaseModel):
    goal_id: str
    messages: list[str] = Field(default_factory=list)


def to_document(analysis: ProgressAnalysis) -> dict[str, Any]:
    """Plain JSON-safe key/value view of the analysis."""
    return analysis.model_dump(mode="json")


async def narrate(analysis: ProgressAnalysis, generator: TextGenerator) -> Narration:
    """Ask `generator` to phrase `analysis`. The analysis itself is left untouched."""
    document = to_document(analysis)
    messages = await generator.generate(document)
    bad = [m for m in messages if not isinstance(m, str)]
    if bad:
        raise TypeError(f"Text generator returned non-string items: {bad!r}")
    logger.debug("Narrated goal %s with %d message(s)", analysis.goal_id, len(messages))
    return Narration(goal_id=analysis.goal_id, messages=list(messages))
