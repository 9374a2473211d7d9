import re
from typing import Dict, List, Optional, Sequence

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from oceanguard.schemas.social_media import RawPost, SentimentBucket

NEGATIVE_THRESHOLD = -0.5
POSITIVE_THRESHOLD = 0.5
BUCKET_ORDER = ("Negative", "Neutral", "Positive")

TOKEN_RE = re.compile(r"[a-z0-9']+")


class SentimentScorer:
    """
    Lexicon-based comparative sentiment over post text.

    The comparative score is the sum of the VADER lexicon valences of the
    tokens divided by the number of tokens. Unknown words count as 0 but still
    add to the token count.
    """

    def __init__(self, lexicon: Optional[Dict[str, float]] = None):
        if lexicon is None:
            lexicon = SentimentIntensityAnalyzer().lexicon
        self._lexicon = lexicon

    def comparative(self, text: str) -> float:
        tokens = TOKEN_RE.findall((text or "").lower())
        if not tokens:
            return 0.0
        total = sum(self._lexicon.get(token, 0.0) for token in tokens)
        return total / len(tokens)

    def classify(self, text: str) -> str:
        comp = self.comparative(text)
        if comp < NEGATIVE_THRESHOLD:
            return "Negative"
        if comp > POSITIVE_THRESHOLD:
            return "Positive"
        return "Neutral"

    def score_batch(self, posts: Sequence[RawPost]) -> List[SentimentBucket]:
        counts = {name: 0 for name in BUCKET_ORDER}
        for post in posts:
            counts[self.classify(post.text)] += 1

        # An empty batch is reported as 100% neutral so percentages always sum to 100
        if not posts:
            return [
                SentimentBucket(name=name, count=0, percentage=100 if name == "Neutral" else 0)
                for name in BUCKET_ORDER
            ]

        total = len(posts)
        return [
            SentimentBucket(name=name, count=counts[name], percentage=round(counts[name] / total * 100))
            for name in BUCKET_ORDER
        ]
