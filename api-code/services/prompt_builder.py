from __future__ import annotations

import math
from typing import Dict, List, Optional


STYLE_ANALYSIS_MAX_TOKENS = 600
STYLE_ANALYSIS_TEMPERATURE = 0.5
SCRIPT_TEMPERATURE = 0.7

WORDS_PER_TOKEN = 0.75
SCRIPT_MIN_TOKENS = 256
SCRIPT_MAX_TOKENS = 2000

STYLE_ANALYSIS_PROMPT = (
    "You are a writing style synthesiser. Given the following samples, extract a concise "
    "master style guide. Capture tone, pacing, vocabulary, imagery, sentence length, "
    "hypnotic devices (e.g., repetition, rhythm, embedded commands), and persona. "
    'Provide 5-7 bullet points titled "Master Style" followed by a 2-3 sentence summary '
    'under "Voice Overview". Keep it actionable.'
)

SCRIPT_PROMPT_TEMPLATE = (
    "Using the provided master style, write a hypnotic script. Respect the tone, pacing, "
    "and hypnotic devices described. Approximate length: {length} words. "
    "Intensity 1-10: {intensity} (1 = light relaxation, 10 = profound trance). "
    "Include a brief induction, deepening, themed body, and gentle exit. "
    "Keep language safe and supportive."
)


def join_samples(samples: List[str]) -> str:
    return "\n\n".join(f"Sample {index}:\n{sample}" for index, sample in enumerate(samples, start=1))


def build_style_messages(samples: List[str]) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": STYLE_ANALYSIS_PROMPT},
        {"role": "user", "content": join_samples(samples)},
    ]


def build_script_messages(
    style_summary: str,
    *,
    length: int,
    intensity: int,
    theme: Optional[str] = None,
) -> List[Dict[str, str]]:
    system_prompt = SCRIPT_PROMPT_TEMPLATE.format(length=length, intensity=intensity)
    theme_line = f"Theme or focus: {theme}\n\n" if theme else ""
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": f"{theme_line}Master style:\n{style_summary}"},
    ]


def script_token_budget(length: int) -> int:
    """Convert a word count into a bounded max_tokens value (~0.75 words per token)."""
    estimated = math.floor(length / WORDS_PER_TOKEN + 0.5)
    return min(max(estimated, SCRIPT_MIN_TOKENS), SCRIPT_MAX_TOKENS)
