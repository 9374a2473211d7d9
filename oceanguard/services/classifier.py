"""
Keyword relevance filters for social posts.

Both predicates are plain lowercase substring tests: no tokenization and no
stemming, so "sea" also matches "research". That imprecision is accepted.
"""
from typing import Optional, Tuple

from oceanguard.schemas.social_media import ClassifiedPost, RawPost

# Explicit hazard phrases are enough on their own to mark a post as ocean related
OCEAN_HAZARD_PHRASES: Tuple[str, ...] = (
    "oil spill", "pollution", "debris", "plastic waste",
    "coral bleaching", "ocean acidification", "overfishing",
    "tsunami", "hurricane", "cyclone", "storm surge",
    "red tide", "algal bloom", "dead zone", "microplastics",
    "ghost nets", "marine litter", "toxic", "contamination",
    "ocean warming", "sea level rise", "coastal erosion",
    "maritime disaster", "shipwreck", "chemical spill",
)

OCEAN_WORDS: Tuple[str, ...] = (
    "ocean", "marine", "sea", "coastal", "beach",
    "reef", "maritime", "naval", "shipping",
)

HAZARD_INDICATORS: Tuple[str, ...] = (
    "oil spill", "pollution", "debris", "plastic", "waste",
    "bleaching", "acidification", "overfishing", "illegal fishing",
    "tsunami", "hurricane", "cyclone", "storm", "flood",
    "red tide", "algal bloom", "dead zone", "microplastic",
    "ghost net", "litter", "toxic", "contamination", "spill",
    "warming", "sea level", "erosion", "threat", "danger",
    "disaster", "crisis", "damage", "destruction", "dying",
    "endangered", "extinction", "dead", "kill", "harm",
    "emergency", "warning", "alert", "risk", "vulnerable",
)

# Appreciation / aesthetic language. Any of these vetoes a hazard match.
EXCLUSION_WORDS: Tuple[str, ...] = (
    "beautiful", "amazing", "stunning", "gorgeous", "adorable",
    "cute", "playing", "dance", "majestic", "peaceful",
    "relaxing", "therapy", "meditation", "serene",
)


def _contains_any(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def is_ocean_related(text: Optional[str]) -> bool:
    if not text:
        return False
    lower_text = text.lower()
    return _contains_any(lower_text, OCEAN_HAZARD_PHRASES) or _contains_any(lower_text, OCEAN_WORDS)


def is_hazard_related(text: Optional[str]) -> bool:
    """
    True when the text carries hazard language and no appreciation language.

    The exclusion set wins over the hazard set: "beautiful dead coral reef"
    is not a hazard post even though it mentions "dead".
    """
    if not text:
        return False
    lower_text = text.lower()
    has_hazard = _contains_any(lower_text, HAZARD_INDICATORS)
    is_appreciation = _contains_any(lower_text, EXCLUSION_WORDS)
    return has_hazard and not is_appreciation


def classify_post(post: RawPost) -> ClassifiedPost:
    text = post.text
    return ClassifiedPost(
        **post.model_dump(),
        is_ocean_related=is_ocean_related(text),
        is_hazard_related=is_hazard_related(text),
    )
