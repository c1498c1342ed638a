"""Doctor name and specialty matching strategies."""

from enum import Enum
from typing import Callable, List, TypeVar

T = TypeVar("T")


class MatchStrategy(str, Enum):
    """
    How a free-text reference is compared with directory values.

    One strategy is configured per process and shared by every operation
    that resolves a doctor, so booking, availability, cancellation and
    rescheduling agree on what "Dr. Rao" means.
    """
    EXACT = "exact"
    SUBSTRING = "substring"

    def matches(self, value: str, query: str) -> bool:
        """Case-insensitive comparison of a stored value against a query."""
        value_key = value.strip().casefold()
        query_key = query.strip().casefold()
        if not query_key:
            return False
        if self == MatchStrategy.EXACT:
            return value_key == query_key
        return query_key in value_key

    def filter(self, items: List[T], query: str, key: Callable[[T], str]) -> List[T]:
        """
        Return the items whose key matches the query.

        With the substring strategy an exact hit takes precedence over partial
        hits, so a full name still resolves when it is a prefix of another.
        """
        hits = [item for item in items if self.matches(key(item), query)]
        if self == MatchStrategy.SUBSTRING and len(hits) > 1:
            exact = [item for item in hits if MatchStrategy.EXACT.matches(key(item), query)]
            if exact:
                return exact
        return hits
