import enum
import logging
import math
import re
import sys
from dataclasses import dataclass
from typing import List, Sequence

from rapidfuzz.distance import Levenshtein

from product_scraper.config.scraper_config import MatchThresholds
from product_scraper.core.errors import NoMatchError
from product_scraper.core.models import BasicInfo

EPSILON = sys.float_info.epsilon

# Weight of the name length in scores when re-ranking two close hits
RERANK_FIELD_NORM_WEIGHT = 0.5

_STRIPPED = re.compile(r"[{}\[\]().,+\-]")
_SEPARATORS = re.compile(r"[\s/|\\]+")

logger = logging.getLogger("scraper.matching")


class Relevance(enum.IntEnum):
    """Confidence in the top hit of a product search."""

    NONE = 0
    WEAK = 1
    AMBIGUOUS = 2
    STRONG = 3


@dataclass(frozen=True)
class MatchHit:
    index: int
    score: float


@dataclass(frozen=True)
class FuseMatchResult:
    index: int
    relevance: Relevance


def normalize(text: str) -> str:
    """Drop brackets and punctuation, collapse separators to single spaces."""
    return _SEPARATORS.sub(" ", _STRIPPED.sub("", text)).strip()


def substring_distance(pattern: str, text: str) -> int:
    """Fewest edits turning pattern into some substring of text.

    Never more than len(pattern), the cost of deleting every character.
    """
    best = len(pattern)
    for start in range(len(text)):
        # A longer substring would need more than best deletions
        for end in range(start + 1, min(len(text), start + len(pattern) + best) + 1):
            best = min(best, Levenshtein.distance(pattern, text[start:end], score_cutoff=best))
    return best


class FuzzySearcher:
    """Scores a fixed list of product names against queries.

    Scores range from 0 (identical) to 1 (unrelated). A non-zero
    field_norm_weight makes names with more words score worse, which
    separates hits that are otherwise equally close.
    """

    def __init__(self, names: Sequence[str], field_norm_weight: float = 0.0):
        self.names = [name.lower() for name in names]
        self.field_norm_weight = field_norm_weight

    def _norm(self, name: str) -> float:
        tokens = len(name.split()) or 1
        return round(1 / math.pow(tokens, 0.5 * self.field_norm_weight), 3)

    def _hit(self, index: int, score: float) -> MatchHit:
        return MatchHit(index, math.pow(max(score, EPSILON), self._norm(self.names[index])))

    @staticmethod
    def _sorted(hits: List[MatchHit]) -> List[MatchHit]:
        return sorted(hits, key=lambda hit: (hit.score, hit.index))

    def search(self, query: str) -> List[MatchHit]:
        """Approximate search: errors of the best alignment of query within each name.

        A name scores substring_distance(query, name) / len(query), so three
        wrong letters in a ten letter query score 0.3 wherever they are.
        Names needing as many edits as the query has letters are not hits.
        """
        query = query.lower()
        if not query:
            return []

        hits = []
        for index, name in enumerate(self.names):
            errors = substring_distance(query, name)
            if errors < len(query):
                hits.append(self._hit(index, errors / len(query)))
        return self._sorted(hits)

    def search_tokens(self, tokens: Sequence[str]) -> List[MatchHit]:
        """Exact search: every token must appear in a name as a whole word."""
        patterns = [re.compile(r"(?<!\w)" + re.escape(token.lower()) + r"(?!\w)") for token in tokens]
        hits = [
            self._hit(index, 0.0)
            for index, name in enumerate(self.names)
            if patterns and all(pattern.search(name) for pattern in patterns)
        ]
        return self._sorted(hits)


def assess_relevance(hits: Sequence[MatchHit], thresholds: MatchThresholds) -> Relevance:
    """Classify the top hit of a non-empty, sorted hit list."""
    first_score = hits[0].score

    if first_score >= thresholds.first_score:
        return Relevance.NONE

    if first_score >= thresholds.first_score_warning:
        return Relevance.WEAK

    if len(hits) > 1 and hits[1].score - first_score < thresholds.difference:
        return Relevance.AMBIGUOUS

    return Relevance.STRONG


def fuse_search_product(basic_info: BasicInfo, product_names: Sequence[str],
                        brand_thresholds: MatchThresholds,
                        brandless_thresholds: MatchThresholds) -> FuseMatchResult:
    """Find the product among product_names that is closest to basic_info.

    With a brand, names containing every word of the product name and brand
    are looked for first. Without a brand, or if none contains them all, the
    name alone is searched approximately. A result with Relevance.NONE means
    no name is close enough.

    Raises:
        NoMatchError: If the approximate search has no hits at all
    """
    name = normalize(basic_info.name)
    names = [normalize(product_name) for product_name in product_names]
    searcher = FuzzySearcher(names)

    hits: List[MatchHit] = []
    tokens = None
    thresholds = brandless_thresholds

    # Search by a name and a brand to get a more precise result
    if basic_info.brand:
        tokens = name.split() + normalize(basic_info.brand).split()
        hits = searcher.search_tokens(tokens)
        thresholds = brand_thresholds

    # Search only by a name
    if not hits:
        tokens = None
        hits = searcher.search(name)
        thresholds = brandless_thresholds

        if not hits:
            raise NoMatchError(f"No product name resembles {basic_info.name}")

    relevance = assess_relevance(hits, thresholds)

    # The first hit is close but so is the second one: let the name length
    # count to tell them apart
    if relevance == Relevance.AMBIGUOUS:
        reranker = FuzzySearcher(names, field_norm_weight=RERANK_FIELD_NORM_WEIGHT)
        hits = reranker.search_tokens(tokens) if tokens is not None else reranker.search(name)
        logger.debug("Re-ranked ambiguous hits for %r: %s", basic_info.name, hits[:2])

    return FuseMatchResult(index=hits[0].index, relevance=relevance)
