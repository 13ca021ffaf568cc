"""Discovery outcome data models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DiscoveryResult:
    """What one discovery strategy found.

    ``paths`` are playable files relative to the asset root. ``known_assets``
    holds every asset path seen in the same listing when the listing was
    complete enough to answer sidecar lookups, otherwise None.
    """
    paths: list[str] = field(default_factory=list)
    known_assets: frozenset[str] | None = None

    def __bool__(self) -> bool:
        return bool(self.paths)


@dataclass(frozen=True)
class DiscoveryAttempt:
    """Outcome of running a single strategy."""
    strategy: str
    entries_found: int
    error: str | None = None


@dataclass
class DiscoveryReport:
    """Record of the strategies tried during one discovery pass."""
    attempts: list[DiscoveryAttempt] = field(default_factory=list)
    winning_strategy: str | None = None

    def add(self, attempt: DiscoveryAttempt) -> None:
        self.attempts.append(attempt)

    def explain(self) -> str:
        """Human readable summary of what was attempted."""
        if self.winning_strategy:
            return f"Games found using {self.winning_strategy}."
        if not self.attempts:
            return "No discovery strategy was run."
        lines = ["No games were found. Tried:"]
        for attempt in self.attempts:
            outcome = f"failed ({attempt.error})" if attempt.error else "nothing found"
            lines.append(f"  - {attempt.strategy}: {outcome}")
        return "\n".join(lines)
