"""
Parsing of research-stage responses.

The primary path expects a JSON object matching ``ResearchNotes`` (markdown
code fences are tolerated). If that fails the single fallback treats the
response as prose: the whole text becomes the summary and bullet lines
become key facts. There is no further heuristic.
"""

from typing import List
import json
import re
import structlog
from pydantic import BaseModel, Field, ValidationError

logger = structlog.get_logger(__name__)

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)
_BULLET_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+(.+?)\s*$")

MAX_FALLBACK_FACTS = 20


class ResearchNotes(BaseModel):
    """Structured output of the research stage"""
    topics: List[str] = Field(default_factory=list)
    key_facts: List[str] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)
    references: List[str] = Field(default_factory=list)
    summary: str = ""
    structured: bool = Field(default=True, description="False when produced by the prose fallback")


def parse_research_notes(text: str) -> ResearchNotes:
    """Parse a research response into notes"""

    try:
        notes = ResearchNotes.model_validate_json(_strip_fences(text))
    except (ValidationError, json.JSONDecodeError, ValueError) as e:
        logger.info("Research response is not structured, using prose fallback", error=str(e)[:200])
        return _notes_from_prose(text)

    if not notes.summary:
        notes.summary = " ".join(notes.key_facts[:3])
    return notes


def _strip_fences(text: str) -> str:
    text = text.strip()
    match = _JSON_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text


def _notes_from_prose(text: str) -> ResearchNotes:
    facts = []
    for line in text.splitlines():
        match = _BULLET_RE.match(line)
        if match:
            facts.append(match.group(1))
        if len(facts) >= MAX_FALLBACK_FACTS:
            break

    return ResearchNotes(key_facts=facts, summary=text.strip(), structured=False)
