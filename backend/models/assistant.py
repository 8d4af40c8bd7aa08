"""Assistant data models."""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AssistantProfile:
    """Stored assistant configuration used to set up chat sessions."""
    id: int
    name: Optional[str] = None
    description: Optional[str] = None
    user_role: Optional[str] = None
    model_info: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AssistantProfile":
        return cls(
            id=row["id"],
            name=row.get("name"),
            description=row.get("description"),
            user_role=row.get("user_role"),
            model_info=row.get("model_info"),
        )
