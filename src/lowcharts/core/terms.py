"""Bar charts of term frequencies."""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class TermCount:
    """A label and the number of times it was seen."""

    label: str
    count: int


class MatchBar:
    """Number of lines containing each of a fixed set of strings.

    Example:
        ```python
        bar = MatchBar(["GET", "POST"])
        bar.observe("GET /index.html 200")
        bar.rows()  # [TermCount("GET", 1), TermCount("POST", 0)]
        ```
    """

    def __init__(self, labels: Sequence[str]) -> None:
        self._labels = tuple(labels)
        self._counts = [0] * len(self._labels)

    def observe(self, line: str) -> None:
        """Count line once for every label it contains."""
        for i, label in enumerate(self._labels):
            if label in line:
                self._counts[i] += 1

    def load(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.observe(line)

    def rows(self) -> list[TermCount]:
        return [
            TermCount(label, count)
            for label, count in zip(self._labels, self._counts, strict=True)
        ]

    @property
    def total(self) -> int:
        return sum(self._counts)

    @property
    def top(self) -> int:
        return max(self._counts, default=0)


class CommonTerms:
    """The most frequent terms of an arbitrary input.

    Args:
        lines: How many of the most frequent terms to report.
    """

    def __init__(self, lines: int = 10) -> None:
        if lines < 1:
            raise ValueError(f"lines must be >= 1 (was {lines})")
        self.lines = lines
        self._terms: Counter[str] = Counter()

    def observe(self, term: str) -> None:
        self._terms[term] += 1

    def load(self, terms: Iterable[str]) -> None:
        self._terms.update(terms)

    def __len__(self) -> int:
        return len(self._terms)

    def count(self, term: str) -> int:
        return self._terms[term]

    def rows(self) -> list[TermCount]:
        """Most frequent terms first, at most `lines` of them."""
        top = self._terms.most_common(self.lines)
        return [TermCount(term, count) for term, count in top]
