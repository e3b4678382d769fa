from dataclasses import dataclass, field
from typing import Optional

from .context import ContextKey, ContextType, EmptyKey, parse_context_key


def _number(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


@dataclass(frozen=True)
class Entry:
    """A stored value as seen by the resolver.

    ``context_type`` keeps the raw string so that entries written by a newer
    extension with an unknown type still load; such entries never match and
    rank last.
    """
    id: str
    value: str
    context_type: str
    context_key: Optional[str] = None
    label: Optional[str] = None
    shortcut: Optional[str] = None
    order: Optional[float] = None
    created_at: Optional[float] = None
    key: ContextKey = field(default_factory=EmptyKey, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Entry":
        context_key = data.get("contextKey")
        if not isinstance(context_key, str):
            context_key = None
        value = data.get("value")
        return cls(
            id=str(data.get("id", "")),
            value=value if isinstance(value, str) else "",
            context_type=str(data.get("contextType", "")),
            context_key=context_key,
            label=data.get("label") or None,
            shortcut=data.get("shortcut") or None,
            order=_number(data.get("order")),
            created_at=_number(data.get("createdAt")),
            key=parse_context_key(
                context_key, strip=data.get("contextType") == ContextType.FIELD_ONLY.value),
        )

    @property
    def type(self) -> Optional[ContextType]:
        return ContextType.coerce(self.context_type)

    @property
    def sort_key(self) -> float:
        """User-defined order wins; otherwise creation time."""
        if self.order is not None:
            return self.order
        if self.created_at is not None:
            return self.created_at
        return 0

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "value": self.value,
            "contextType": self.context_type,
            "contextKey": self.context_key,
        }
        if self.label:
            data["label"] = self.label
        if self.shortcut:
            data["shortcut"] = self.shortcut
        if self.order is not None:
            data["order"] = self.order
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        return data
