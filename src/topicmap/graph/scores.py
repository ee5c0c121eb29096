"""Score - The fixed, ordered set of values an arguable can be scored with."""

from __future__ import annotations

from enum import Enum


class Score(Enum):
    """Score of a node or edge.

    ``NONE`` ("-") is the no-score sentinel and orders before every value.
    """

    NONE = "-"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"

    @classmethod
    def parse(cls, value: Score | str | int) -> Score:
        """Coerce a score, its string value, or an integer 1-10.

        Raises:
            ValueError: If the value is not a possible score.
        """
        if isinstance(value, Score):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            raise ValueError(f"Invalid score: {value!r}") from None

    @property
    def rank(self) -> int:
        """Position in the ordered score set (0 for NONE)."""
        return _ORDER.index(self)

    @property
    def is_scored(self) -> bool:
        return self is not Score.NONE

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Score):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Score):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Score):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Score):
            return NotImplemented
        return self.rank >= other.rank


_ORDER: tuple[Score, ...] = tuple(Score)

POSSIBLE_SCORES: tuple[str, ...] = tuple(score.value for score in Score)

__all__ = ["Score", "POSSIBLE_SCORES"]
