"""Run a provider's patterns over document text."""

from dataclasses import dataclass, field

from .patterns import FieldType, Pattern, PatternLibrary


@dataclass
class MatchResult:
    """All matches of one pattern in a document.

    Each entry of ``matches`` holds the capture groups of one occurrence.
    """

    pattern: Pattern
    matches: list[tuple[str, ...]] = field(default_factory=list)

    @property
    def confidence(self) -> float:
        return self.pattern.confidence

    @property
    def first(self) -> tuple[str, ...]:
        return self.matches[0] if self.matches else ()


class PatternMatcher:
    """Applies the patterns of a PatternLibrary to text."""

    def __init__(self, library: PatternLibrary):
        self.library = library

    def match(self, text: str, provider: str) -> dict[str, MatchResult]:
        """Collect every non-empty pattern match for a provider.

        Unknown providers use the generic patterns.

        Args:
            text: Normalized document text
            provider: Provider name from the classifier

        Returns:
            dict: Pattern name to MatchResult, in pattern order
        """
        results: dict[str, MatchResult] = {}
        for pattern in self.library.resolve(provider).patterns:
            found = [m.groups() for m in pattern.regex.finditer(text)]
            if found:
                results[pattern.name] = MatchResult(pattern=pattern, matches=found)
        return results


def best_match(
    results: dict[str, MatchResult], field_type: FieldType | str
) -> MatchResult | None:
    """Pick the highest-confidence result of a field type.

    Ties keep the first result encountered.
    """
    wanted = FieldType(field_type)
    best: MatchResult | None = None
    for result in results.values():
        if result.pattern.field_type != wanted:
            continue
        if best is None or result.confidence > best.confidence:
            best = result
    return best


def matches_of_type(
    results: dict[str, MatchResult], *field_types: FieldType
) -> list[MatchResult]:
    return [r for r in results.values() if r.pattern.field_type in field_types]
