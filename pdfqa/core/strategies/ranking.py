"""Multi-document ranking with recency weighting."""

import logging
from functools import cmp_to_key

from ..models.document import Match, RankedSource

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000

# (max age in minutes, boost); first matching step wins
DEFAULT_BOOST_SCHEDULE: tuple[tuple[float, float], ...] = (
    (5, 0.20),
    (30, 0.10),
    (120, 0.05),
)

# Float slack so that 0.60 - 0.55 still counts as within a 0.05 margin
_EPSILON = 1e-9


def group_by_source(matches: list[Match]) -> dict[str, list[Match]]:
    """Group matches by source, keeping first-seen order."""
    groups: dict[str, list[Match]] = {}
    for match in matches:
        groups.setdefault(match.source, []).append(match)
    return groups


def recency_boost(
    timestamp: int,
    now_ms: int,
    schedule: tuple[tuple[float, float], ...] = DEFAULT_BOOST_SCHEDULE,
) -> float:
    """Additive bonus for a document uploaded at ``timestamp``."""
    age_minutes = (now_ms - timestamp) / MS_PER_MINUTE
    for max_age, boost in schedule:
        if age_minutes < max_age:
            return boost
    return 0.0


class RankingEngine:
    """Rank candidate documents by similarity plus recency."""

    def __init__(
        self,
        tie_margin: float = 0.05,
        boost_schedule: tuple[tuple[float, float], ...] = DEFAULT_BOOST_SCHEDULE,
    ):
        """Initialize ranking engine.

        Args:
            tie_margin: Final-score difference treated as a near tie.
            boost_schedule: Recency steps as (max age in minutes, boost).
        """
        self._tie_margin = tie_margin
        self._boost_schedule = boost_schedule

    def rank(
        self, matches_by_source: dict[str, list[Match]], now_ms: int
    ) -> list[RankedSource]:
        """Rank sources.

        Args:
            matches_by_source: Matches grouped per document.
            now_ms: Current time in epoch milliseconds.

        Returns:
            Ranked sources, best candidate first.
        """
        ranked = [
            self._score_source(source, matches, now_ms)
            for source, matches in matches_by_source.items()
            if matches
        ]
        # Near ties are not transitive; a canonical pre-order keeps the
        # result independent of the order the index returned matches in.
        ranked.sort(key=lambda r: (-r.final_score, r.source))
        ranked.sort(key=cmp_to_key(self._compare))

        if logger.isEnabledFor(logging.DEBUG):
            summary = ", ".join(
                f"{r.source}={r.final_score:.3f}(+{r.recency_boost:.2f})"
                for r in ranked
            )
            logger.debug(f"Ranking: [{summary}]")

        return ranked

    def _score_source(
        self, source: str, matches: list[Match], now_ms: int
    ) -> RankedSource:
        scores = [m.score for m in matches]
        max_score = max(scores)
        # All chunks of one ingestion share the upload timestamp
        timestamp = matches[0].timestamp
        boost = recency_boost(timestamp, now_ms, self._boost_schedule)

        return RankedSource(
            source=source,
            matches=sorted(matches, key=lambda m: m.score, reverse=True),
            max_score=max_score,
            avg_score=sum(scores) / len(scores),
            timestamp=timestamp,
            match_count=len(matches),
            recency_boost=boost,
            final_score=max_score + boost,
        )

    def _compare(self, a: RankedSource, b: RankedSource) -> int:
        """Newer first within ``tie_margin``, otherwise higher final score.

        Not transitive: 0.80, 0.84 and 0.88 from newest to oldest form a
        cycle. ``rank`` pre-orders candidates so such cycles resolve the
        same way every time.
        """
        diff = b.final_score - a.final_score
        if abs(diff) <= self._tie_margin + _EPSILON and a.timestamp != b.timestamp:
            return -1 if a.timestamp > b.timestamp else 1
        if diff != 0:
            return 1 if diff > 0 else -1
        if a.source == b.source:
            return 0
        return -1 if a.source < b.source else 1
