"""Response model for ``format="full"`` requests."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass
class FullResponse:
    """Status, headers and parsed body of one HTTP response."""

    status: int
    status_text: str
    ok: bool
    url: str
    redirected: bool = False
    elapsed_ms: Optional[float] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
