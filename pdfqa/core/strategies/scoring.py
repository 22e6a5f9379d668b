
import logging
from abc import ABC, abstractmethod

from ..models.document import Match

logger = logging.getLogger(__name__)


class ScoringStrategy(ABC):
    """Base class for match filters applied before ranking."""

    @abstractmethod
    def apply(self, query: str, matches: list[Match]) -> list[Match]:
        """Apply strategy to matches."""
        ...


class MinRelevanceStrategy(ScoringStrategy):
    """Drop near-zero noise matches."""

    def __init__(self, min_score: float = 0.15):
        """Initialize strategy.

        Args:
            min_score: Minimum similarity a match must reach.
        """
        self._min_score = min_score

    def apply(self, query: str, matches: list[Match]) -> list[Match]:
        """Filter matches below the relevance floor."""
        if not matches:
            return matches

        filtered = [m for m in matches if m.score >= self._min_score]

        if len(filtered) < len(matches):
            logger.info(
                f"Relevance floor: {len(matches)} → {len(filtered)} "
                f"(min_allowed={self._min_score:.2f})"
            )

        return filtered


class EmptyTextStrategy(ScoringStrategy):
    """Drop matches whose stored text is missing."""

    def apply(self, query: str, matches: list[Match]) -> list[Match]:
        filtered = [m for m in matches if m.text and m.text.strip()]

        if len(filtered) < len(matches):
            logger.warning(
                f"Dropped {len(matches) - len(filtered)} matches without text"
            )

        return filtered
