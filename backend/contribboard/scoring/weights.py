from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

DEFAULT_CONTENT_MODEL_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "wikitext": 1.0,
        "javascript": 1.3,
        "css": 1.3,
        "json": 1.2,
        "text": 0.8,
    }
)


@dataclass(frozen=True)
class ScoringWeights:
    new_page: float = 10
    edit_small: float = 1
    edit_medium: float = 3
    edit_large: float = 5
    file_upload: float = 8
    # Never applied by any scoring path. Unclear whether patrolled edits were
    # meant to earn this bonus, so it stays unwired until that is decided.
    page_patrolled: float = 2
    # Content length where the medium and large tiers start.
    medium_threshold: int = 100
    large_threshold: int = 1000
    content_models: Mapping[str, float] = field(default_factory=lambda: DEFAULT_CONTENT_MODEL_WEIGHTS)

    def content_model_weight(self, content_model: str | None) -> float:
        if content_model is None:
            return 1.0
        return self.content_models.get(content_model, 1.0)


DEFAULT_WEIGHTS = ScoringWeights()
