"""Narrative segment analysis with an LLM, with rule-based fallback.

For each customer segment the model is asked for a short persona, marketing
recommendations and operational insights, returned as JSON. When no client
is configured or the call fails for any reason, fallback text built from the
segment statistics is used instead, so callers always get a full answer.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import pandas as pd

from colmado_core.exceptions import AIAnalysisError
from colmado_core.insights.clustering import CustomerSegment
from colmado_core.insights.config import SAMPLE_TRANSACTIONS
from colmado_core.insights.date_formatters import ENGLISH_DAYS
from colmado_core.llm.client import ChatClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert market analyst for Dominican colmados. "
    "Provide concise, actionable insights in JSON format only."
)
TEMPERATURE = 0.3
MAX_TOKENS = 800
PROMPT_SAMPLE_ROWS = 5

ENHANCE_DELAY_SECONDS = 0.5
BATCH_DELAY_SECONDS = 0.3


@dataclass
class AIAnalysisResponse:
    persona_description: str = ""
    marketing_recommendations: list[str] = field(default_factory=list)
    operational_insights: list[str] = field(default_factory=list)


def _peak_days_str(segment: CustomerSegment) -> str:
    return ", ".join(ENGLISH_DAYS[d] for d in segment.peak_days)


def build_segment_prompt(segment: CustomerSegment, samples: pd.DataFrame) -> str:
    """Render the user prompt for one segment and up to five sample rows."""
    sample_lines = []
    for i, row in enumerate(samples.head(PROMPT_SAMPLE_ROWS).itertuples(index=False), start=1):
        sample_lines.append(
            f"{i}. {row.hour_of_day}:00 - RD${row.total_value:.0f} - "
            f"{row.item_count} items - {', '.join(row.categories)}"
        )

    return f"""
Analyze this customer segment for a Dominican colmado (mini market):

SEGMENT: {segment.segment_name}
Type: {segment.segment_type}
Average basket: RD${segment.avg_basket_value:.0f}
Average items: {segment.avg_items_per_basket:.1f}
Peak hours: {', '.join(str(h) for h in segment.peak_hours)}:00
Peak days: {_peak_days_str(segment)}
Top categories: {', '.join(segment.top_categories)}
Transaction count: {segment.transaction_count}
Frequency: {segment.frequency_pattern}

SAMPLE TRANSACTIONS:
{chr(10).join(sample_lines)}

Provide:
1. Customer persona description (2-3 sentences describing who this customer is)
2. Marketing recommendations (3-4 specific, actionable ideas for this segment)
3. Operational insights (2-3 suggestions for store operations)

Consider Dominican culture, colmado shopping habits, and local preferences.

Return ONLY valid JSON:
{{
  "personaDescription": "string",
  "marketingRecommendations": ["string", "string", "string"],
  "operationalInsights": ["string", "string"]
}}
""".strip()


def parse_analysis_response(content: str) -> AIAnalysisResponse:
    """Extract the JSON object from a model reply.

    The reply may wrap the object in prose or a ```json fence. Both
    camelCase and snake_case keys are accepted.

    Raises:
        AIAnalysisError: If no valid JSON object can be parsed.
    """
    match = re.search(r"\{.*\}", content, re.DOTALL)
    json_str = match.group(0) if match else re.sub(r"```json\n?|```", "", content).strip()
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise AIAnalysisError(f"Model reply is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AIAnalysisError("Model reply JSON is not an object")

    def pick(camel: str, snake: str, default):
        value = data.get(camel, data.get(snake))
        return value if value else default

    return AIAnalysisResponse(
        persona_description=str(pick("personaDescription", "persona_description", "")),
        marketing_recommendations=[
            str(x) for x in pick("marketingRecommendations", "marketing_recommendations", [])
        ],
        operational_insights=[str(x) for x in pick("operationalInsights", "operational_insights", [])],
    )


def generate_fallback_insights(segment: CustomerSegment) -> AIAnalysisResponse:
    """Rule-based persona and recommendations from segment statistics."""
    peak_days = _peak_days_str(segment)
    peak_hours = ", ".join(f"{h}:00" for h in segment.peak_hours)
    top = segment.top_categories
    basket = f"RD${segment.avg_basket_value:.0f}"
    items = f"{segment.avg_items_per_basket:.1f}"

    if segment.segment_type == "temporal":
        return AIAnalysisResponse(
            persona_description=(
                f"{segment.segment_name} customers typically visit during {peak_hours}. "
                f"They have an average basket of {basket} with {items} items. "
                f"Most active on {peak_days}."
            ),
            marketing_recommendations=[
                f"Schedule promotions during peak hours ({peak_hours})",
                f"Focus on {top[0] if top else 'popular'} category displays during this time",
                "Consider time-specific discounts to increase traffic during slower periods",
            ],
            operational_insights=[
                f"Ensure adequate staffing during peak hours: {peak_hours}",
                f"Stock up on {' and '.join(top[:2])} before peak times",
            ],
        )

    if segment.segment_type == "basket_value":
        return AIAnalysisResponse(
            persona_description=(
                f"{segment.segment_name} customers with average basket of {basket}. "
                f"They typically purchase {items} items per visit, "
                f"primarily from {', '.join(top[:3])} categories."
            ),
            marketing_recommendations=[
                f"Create bundle deals targeting {segment.segment_name} basket sizes",
                f"Offer loyalty rewards for repeat {segment.segment_name} purchases",
                "Position impulse items near checkout for this segment",
            ],
            operational_insights=[
                f"Optimize checkout speed for {segment.segment_name} basket sizes",
                "Ensure popular items for this segment are always in stock",
            ],
        )

    if segment.segment_type == "product_preference":
        return AIAnalysisResponse(
            persona_description=(
                f"{segment.segment_name} customers prefer {', '.join(top[:3])} products. "
                f"Average spend of {basket} with {segment.frequency_pattern} visits."
            ),
            marketing_recommendations=[
                f"Cross-sell complementary items to {top[0] if top else 'these'} buyers",
                f"Create category-specific promotions for {segment.segment_name}",
                "Highlight new arrivals in preferred categories",
            ],
            operational_insights=[
                f"Maintain strong inventory in {' and '.join(top[:2])}",
                "Train staff on product knowledge for these categories",
            ],
        )

    return AIAnalysisResponse()


def analyze_segment_personality(
    segment: CustomerSegment,
    samples: pd.DataFrame,
    client: Optional[ChatClient] = None,
) -> AIAnalysisResponse:
    """Ask the LLM to describe a segment; fall back to rules on any failure.

    Args:
        segment: Segment to describe.
        samples: Feature rows belonging to the segment.
        client: Chat client. None, or a client without an API key, means
            fallback text is returned without a request.

    Returns:
        AIAnalysisResponse (never raises).
    """
    if client is None or not client.enabled:
        logger.debug("No LLM client configured; using fallback text for %s", segment.segment_id)
        return generate_fallback_insights(segment)

    try:
        content = client.complete(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_segment_prompt(segment, samples)},
            ],
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
        )
        return parse_analysis_response(content)
    except Exception as e:
        logger.warning("AI analysis failed for %s: %s", segment.segment_id, e)
        return generate_fallback_insights(segment)


def sample_transactions_for_segment(
    segment: CustomerSegment,
    features: pd.DataFrame,
    limit: int = SAMPLE_TRANSACTIONS,
) -> pd.DataFrame:
    """Pick up to ``limit`` feature rows representative of a segment.

    Temporal segments match on hour, value segments on the basket size flags
    (Big/Bulk = large, Quick = small, otherwise neither), and preference
    segments on sharing a top category.
    """
    if features.empty:
        return features

    if segment.segment_type == "temporal":
        mask = features["hour_of_day"].isin(segment.peak_hours)
    elif segment.segment_type == "basket_value":
        large = features["is_large_basket"].astype(bool)
        small = features["is_small_basket"].astype(bool)
        name = segment.segment_name
        if "Big" in name or "Bulk" in name:
            mask = large
        elif "Quick" in name:
            mask = small
        else:
            mask = ~large & ~small
    elif segment.segment_type == "product_preference":
        top = set(segment.top_categories)
        mask = features["categories"].map(lambda cats: any(c in top for c in cats))
    else:
        mask = pd.Series(True, index=features.index)

    return features[mask.astype(bool)].head(limit)


def _apply_analysis(segment: CustomerSegment, analysis: AIAnalysisResponse) -> CustomerSegment:
    return dataclasses.replace(
        segment,
        persona_description=analysis.persona_description,
        marketing_recommendations=list(analysis.marketing_recommendations),
        operational_insights=list(analysis.operational_insights),
    )


def enhance_segments_with_ai(
    segments: list[CustomerSegment],
    features: pd.DataFrame,
    client: Optional[ChatClient] = None,
    delay: float = ENHANCE_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> list[CustomerSegment]:
    """Return copies of ``segments`` with persona text filled in.

    Requests are spaced by ``delay`` seconds when a client is in use.
    """
    enhanced = []
    for segment in segments:
        samples = sample_transactions_for_segment(segment, features)
        enhanced.append(_apply_analysis(segment, analyze_segment_personality(segment, samples, client)))
        if client is not None and client.enabled and delay > 0:
            sleep(delay)
    logger.info("Enhanced %d segment(s)", len(enhanced))
    return enhanced


def batch_analyze_segments(
    segments: list[CustomerSegment],
    features: pd.DataFrame,
    client: Optional[ChatClient] = None,
    cache: Optional[dict[str, AIAnalysisResponse]] = None,
    delay: float = BATCH_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> list[CustomerSegment]:
    """Like enhance_segments_with_ai(), reusing cached analyses by segment id.

    Args:
        segments: Segments to describe.
        features: Features DataFrame the segments were built from.
        client: Chat client, or None for fallback text.
        cache: Mapping of segment id to a previous analysis. Updated in place.
        delay: Seconds between uncached requests.
        sleep: Sleep function (injectable for tests).

    Returns:
        Enhanced copies of the segments, in input order.
    """
    enhanced = []
    hits = 0
    for segment in segments:
        if cache is not None and segment.segment_id in cache:
            enhanced.append(_apply_analysis(segment, cache[segment.segment_id]))
            hits += 1
            continue

        samples = sample_transactions_for_segment(segment, features)
        analysis = analyze_segment_personality(segment, samples, client)
        if cache is not None:
            cache[segment.segment_id] = analysis
        enhanced.append(_apply_analysis(segment, analysis))

        if client is not None and client.enabled and delay > 0:
            sleep(delay)

    logger.info("Analyzed %d segment(s) (%d from cache)", len(enhanced), hits)
    return enhanced
