from typing import List, Sequence

from oceanguard.schemas.social_media import EmergingThreat, KeywordFrequency, RawPost

OCEAN_VOCABULARY: Sequence[str] = (
    "oil spill", "marine debris", "plastic waste", "pollution",
    "coral bleaching", "ocean acidification", "overfishing",
    "beach cleanup", "red tide", "ghost nets", "microplastics",
    "ocean conservation", "marine life", "sea level rise",
)

# Synthetic growth figures assigned by rank. Not measured from historical data.
SYNTHETIC_GROWTH_BY_RANK = (250, 180, 95)
SYNTHETIC_GROWTH_FALLBACK = 50
EMERGING_THREAT_COUNT = 3


def hashtag(term: str) -> str:
    return "#" + term.replace(" ", "")


def extract_top_keywords(
    posts: Sequence[RawPost],
    vocabulary: Sequence[str] = OCEAN_VOCABULARY,
    limit: int = 9,
) -> List[KeywordFrequency]:
    """
    Count, per vocabulary term, the posts whose text contains it.

    Terms that never occur are left out. Ranking is by count descending and
    stays in vocabulary order on ties.
    """
    texts = [post.text.lower() for post in posts]
    counted = []
    for term in vocabulary:
        needle = term.lower()
        count = sum(1 for text in texts if needle in text)
        if count:
            counted.append(KeywordFrequency(term=hashtag(term), count=count))

    ranked = sorted(counted, key=lambda kw: kw.count, reverse=True)
    return ranked[:max(limit, 0)]


def derive_emerging_threats(top_keywords: Sequence[KeywordFrequency]) -> List[EmergingThreat]:
    threats = []
    for rank, keyword in enumerate(top_keywords[:EMERGING_THREAT_COUNT]):
        growth = SYNTHETIC_GROWTH_BY_RANK[rank] if rank < len(SYNTHETIC_GROWTH_BY_RANK) else SYNTHETIC_GROWTH_FALLBACK
        threats.append(EmergingThreat(
            term=keyword.term,
            growth_label=f"+{growth}%",
            description="Trending on social media platforms",
        ))
    return threats
