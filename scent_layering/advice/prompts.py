"""Prompt templates for the text-generation collaborator."""

from __future__ import annotations

from scent_layering.core.models import FragranceRecord, MatchAnalysis

ANALYSIS_SYSTEM_PROMPT = "You are a fragrance expert. Always respond with valid JSON only, no markdown formatting."

PAIRING_SYSTEM_PROMPT = (
    "You are a fragrance expert. Respond with valid JSON only. Only suggest real, existing perfumes."
)

ANALYSIS_TEMPLATE = """You are a professional perfumer and fragrance expert. Analyze the following two perfumes for layering/mixing compatibility.

PERFUME 1:
{first}

PERFUME 2:
{second}

ALGORITHMIC ANALYSIS:
- Overall compatibility score: {score}%
- Shared notes: {shared}
- Complementary notes: {complementary}
- Potential clashes: {clashes}

Based on this information, provide a JSON response with exactly this structure:
{{
  "summary": "2-3 sentence overview of how these fragrances work together when layered",
  "strengths": ["strength 1", "strength 2", "strength 3"],
  "considerations": ["thing to watch out for 1", "thing to watch out for 2"],
  "occasions": ["best occasion 1", "best occasion 2", "best occasion 3"],
  "layeringTip": "specific advice on how to apply these two fragrances together for best results"
}}

Be specific about note interactions. Focus on practical advice."""

PAIRING_TEMPLATE = """You are a fragrance expert who knows which perfumes layer beautifully together.

Given this perfume:
{record}

Suggest 5 REAL, EXISTING perfumes that would create an amazing layered combination with it.
Consider:
- Note harmony (complementary scent families)
- Balance (if one is heavy, suggest lighter complements)
- Known successful layering combinations in the fragrance community

IMPORTANT: Only suggest REAL perfumes that exist. Use exact names.

Respond with ONLY this JSON:
{{
  "pairings": [
    {{
      "name": "Exact Perfume Name",
      "brand": "Brand Name",
      "reason": "Brief reason why this pairing works (15 words max)"
    }}
  ]
}}"""


def format_record(record: FragranceRecord) -> str:
    def joined(notes: list) -> str:
        return ", ".join(note.name for note in notes) or "none listed"

    lines = [
        f"{record.name} by {record.brand}",
        f"  - Top notes: {joined(record.top_notes)}",
        f"  - Heart notes: {joined(record.middle_notes)}",
        f"  - Base notes: {joined(record.base_notes)}",
    ]
    if record.accords:
        lines.append(f"  - Accords: {', '.join(record.accords)}")
    return "\n".join(lines)


def build_analysis_prompt(first: FragranceRecord, second: FragranceRecord, analysis: MatchAnalysis) -> str:
    return ANALYSIS_TEMPLATE.format(
        first=format_record(first),
        second=format_record(second),
        score=analysis.score,
        shared=", ".join(analysis.shared_notes) or "none",
        complementary=", ".join(analysis.complementary_notes) or "none identified",
        clashes=", ".join(analysis.potential_clashes) or "none identified",
    )


def build_pairing_prompt(record: FragranceRecord) -> str:
    return PAIRING_TEMPLATE.format(record=format_record(record))
