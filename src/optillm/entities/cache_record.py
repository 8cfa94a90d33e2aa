"""Cache record domain entity."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RecordMetadata:
    """Scoping metadata stored with every record.

    Attributes:
        provider: Upstream generation provider (e.g. "openai")
        model: Upstream model name (e.g. "gpt-4o-mini")
        user_id: Optional user the result was produced for
        tenant_id: Optional tenant; lookups never cross tenants
    """

    provider: str
    model: str
    user_id: str | None = None
    tenant_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "model": self.model,
            "user_id": self.user_id,
            "tenant_id": self.tenant_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordMetadata":
        return cls(
            provider=data.get("provider") or "",
            model=data.get("model") or "",
            user_id=data.get("user_id") or None,
            tenant_id=data.get("tenant_id") or None,
        )


@dataclass(frozen=True)
class CacheRecord:
    """A persisted result of the expensive call.

    Records are created on a cache miss and never mutated afterwards.

    Attributes:
        id: Unique identifier assigned by the store
        payload: Opaque serialized result
        metadata: Scoping metadata
        prompt: The original request text
        created_at: Unix timestamp of the write
        expires_at: Unix timestamp after which the sweep removes the record,
            None when no TTL was given
        vector: The prompt embedding (empty on search results)
    """

    id: str
    payload: str
    metadata: RecordMetadata
    prompt: str
    created_at: float
    expires_at: float | None = None
    vector: list[float] = field(default_factory=list)

    def age(self, now: float) -> float:
        """Seconds elapsed between creation and ``now``."""
        return now - self.created_at
