"""Split a free-text script into timed narration segments.

Each sentence becomes one ScriptSegment carrying an estimated spoken
duration, a handful of search keywords and a visual-intent label used to
look up stock footage.
"""

import logging
import re

from models.script import ScriptSegment

logger = logging.getLogger(__name__)

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")

# Roughly 10 characters of narration per second of speech
CHARS_PER_SECOND = 10.0
MIN_SEGMENT_DURATION = 3.0

MAX_KEYWORDS = 5
MIN_KEYWORD_LENGTH = 4

STOPWORDS = frozenset(
    {
        # articles
        "the", "a", "an",
        # conjunctions
        "and", "or", "but", "nor", "yet", "so", "because", "while", "when",
        "than", "then", "that", "this", "these", "those",
        # prepositions
        "in", "on", "at", "to", "for", "of", "with", "by", "from", "into",
        "onto", "over", "under", "above", "below", "about", "after",
        "before", "between", "through", "during", "without", "within",
        "across", "along", "around", "behind", "beyond", "toward", "towards",
        "upon", "near",
    }
)

# Checked in order, first match wins
VISUAL_INTENT_RULES = (
    (("sunset", "sun"), "sunset landscape"),
    (("ocean", "sea", "wave"), "ocean waves"),
    (("mountain",), "mountain landscape"),
    (("bird", "fly"), "birds flying"),
    (("night", "dark"), "night sky"),
    (("city", "urban"), "city skyline"),
    (("forest", "tree"), "forest nature"),
    (("car", "road"), "road driving"),
)
DEFAULT_VISUAL_INTENT = "nature landscape"


def estimate_duration(fragment: str) -> float:
    """Estimate how long a fragment takes to narrate, never under 3 seconds."""
    return max(MIN_SEGMENT_DURATION, len(fragment) / CHARS_PER_SECOND)


def extract_keywords(text: str) -> list[str]:
    """Pick up to five content words from text, in their original order."""
    keywords = []
    for token in text.lower().split():
        if len(token) < MIN_KEYWORD_LENGTH or not token.isalpha() or not token.isascii():
            continue
        if token in STOPWORDS:
            continue
        keywords.append(token)
        if len(keywords) == MAX_KEYWORDS:
            break
    return keywords


def classify_visual_intent(text: str) -> str:
    """Map a fragment to a stock footage theme by substring triggers."""
    lowered = text.lower()
    for triggers, label in VISUAL_INTENT_RULES:
        if any(trigger in lowered for trigger in triggers):
            return label
    return DEFAULT_VISUAL_INTENT


class ScriptSegmenter:
    """Turns script text into ordered ScriptSegments."""

    def segment(self, script: str) -> list[ScriptSegment]:
        """Split a script on sentence punctuation into narration segments.

        Args:
            script: Free-text script

        Returns:
            Segments in script order; empty for an empty or blank script
        """
        if not script or not script.strip():
            return []

        segments = []
        for fragment in SENTENCE_BOUNDARY.split(script):
            text = fragment.strip()
            if not text:
                continue
            index = len(segments)
            segments.append(
                ScriptSegment(
                    id=f"segment-{index}",
                    text=text,
                    duration=estimate_duration(fragment),
                    keywords=extract_keywords(text),
                    visual_intent=classify_visual_intent(text),
                )
            )

        logger.debug(f"Segmented script ({len(script)} chars) into {len(segments)} segments")
        return segments
