"""
Article Enrichment Service

Asks Claude for a short summary and a 0-10 virality score per article,
using structured outputs. Never raises: without an API key it produces
placeholder values, and any API failure produces a fallback result.
"""

import json
import logging
import math
import os
import random
import re
import time
from dataclasses import dataclass
from typing import Optional

from anthropic import Anthropic

logger = logging.getLogger(__name__)

# Configuration
MODEL = os.environ.get("ENRICHMENT_MODEL", "claude-haiku-4-5")
MAX_TOKENS = 512
TEMPERATURE = 0
CONTENT_LIMIT = 1000  # Characters of article content sent to the model
MIN_SCORE = 0
MAX_SCORE = 10

# Anthropic beta API version for structured outputs
STRUCTURED_OUTPUTS_BETA = os.environ.get(
    "ANTHROPIC_STRUCTURED_OUTPUTS_BETA",
    "structured-outputs-2025-11-13"
)

PENDING_SUMMARY = "AI summary pending..."
FAILED_SUMMARY = "AI analysis failed."

ENRICHMENT_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "One to two sentence summary of the article"
        },
        "viralScore": {
            "type": "number",
            "description": "Score from 0 to 10 for how likely the story is to spread on social media"
        }
    },
    "required": ["summary", "viralScore"],
    "additionalProperties": False
}

SYSTEM_PROMPT = """You are a content curator helping a creator decide which articles to share.
For each article, write a concise summary of one to two sentences and rate its viral potential.

Score viralScore from 0 to 10:
- 8-10: Likely to spread widely - surprising, emotional, or highly useful
- 5-7: Solid shareable content for an interested audience
- 2-4: Niche or routine news
- 0-1: Unlikely to interest anyone beyond a narrow audience

Respond only with the requested JSON object."""

ARTICLE_PROMPT = """TITLE: {title}

CONTENT:
{content}"""


@dataclass(frozen=True)
class Enrichment:
    """AI-derived summary and virality score attached to an article."""
    summary: str
    score: int


def truncate_content(content: str, limit: int = CONTENT_LIMIT) -> str:
    """Truncate content to specified character limit."""
    content = content or ''
    if len(content) <= limit:
        return content
    return content[:limit]


def _clamp_score(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return MIN_SCORE
    if isinstance(value, float) and not math.isfinite(value):
        return MIN_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, int(round(value))))


def _extract_json(text: str) -> str:
    """Strip a markdown code fence around a JSON payload, if present."""
    match = re.search(r"```(?:json)?\s*(.*?)```", text, re.DOTALL)
    return match.group(1).strip() if match else text.strip()


def parse_enrichment_response(text: Optional[str]) -> Enrichment:
    """
    Parse a model response into an Enrichment, filling defaults.

    Missing or non-string summary becomes "", missing or non-numeric
    viralScore becomes 0, numeric scores are rounded and clamped to 0-10.
    Anything that is not a JSON object yields the all-default result.
    """
    if not text:
        return Enrichment(summary='', score=MIN_SCORE)
    try:
        data = json.loads(_extract_json(text))
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Enrichment response is not valid JSON: {text[:200]}")
        return Enrichment(summary='', score=MIN_SCORE)
    if not isinstance(data, dict):
        return Enrichment(summary='', score=MIN_SCORE)

    summary = data.get('summary')
    if not isinstance(summary, str):
        summary = ''
    return Enrichment(summary=summary.strip(), score=_clamp_score(data.get('viralScore')))


class ArticleEnricher:
    """
    Enrichment adapter around a shared Anthropic client.

    A None client means no credential is configured: every article gets
    the pending placeholder and a synthetic score.
    """

    def __init__(self, client: Optional[Anthropic] = None, model: str = MODEL, rng=None):
        self.client = client
        self.model = model
        self.rng = rng or random.Random()

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def analyze(self, title: str, content: str) -> Enrichment:
        if self.client is None:
            return Enrichment(summary=PENDING_SUMMARY, score=self.rng.randint(1, MAX_SCORE))

        prompt = ARTICLE_PROMPT.format(title=title, content=truncate_content(content))
        start_time = time.time()
        try:
            response = self.client.beta.messages.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                betas=[STRUCTURED_OUTPUTS_BETA],
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
                output_format={
                    "type": "json_schema",
                    "schema": ENRICHMENT_SCHEMA
                }
            )
            text = response.content[0].text if response.content else ''
            enrichment = parse_enrichment_response(text)
        except Exception as e:
            logger.error(f"Enrichment error for '{title[:80]}': {e}")
            return Enrichment(summary=FAILED_SUMMARY, score=MIN_SCORE)

        logger.debug(f"Enrichment for '{title[:80]}' in {int((time.time() - start_time) * 1000)}ms")
        return enrichment


def build_enricher(api_key: Optional[str] = None, model: str = MODEL) -> ArticleEnricher:
    """
    Create the enricher for the application.

    Falls back to ANTHROPIC_API_KEY; without a key the enricher runs in
    placeholder mode and never calls the API.
    """
    if api_key is None:
        api_key = os.environ.get('ANTHROPIC_API_KEY')
    if not api_key:
        logger.warning("ANTHROPIC_API_KEY not set - enrichment will use placeholder summaries")
        return ArticleEnricher(client=None, model=model)
    return ArticleEnricher(client=Anthropic(api_key=api_key), model=model)
