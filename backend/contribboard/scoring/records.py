from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class RevisionEvent:
    user_id: int
    is_new_page: bool
    byte_length: int
    content_model: str | None
    timestamp: datetime


@dataclass
class ScoreBreakdown:
    """Per-user derivation of a score, for diagnostic output only."""

    user_id: int
    components: dict[str, float] = field(default_factory=dict)
    steps: list[str] = field(default_factory=list)
    total: float = 0.0

    def add(self, source: str, amount: float, step: str) -> None:
        self.components[source] = self.components.get(source, 0.0) + amount
        self.steps.append(step)
