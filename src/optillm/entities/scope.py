"""Scoping filter entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ScopeFilter:
    """Exact-match restrictions applied to a similarity search.

    Every field that is set must match the stored record metadata.
    """

    tenant_id: str | None = None
    user_id: str | None = None
    provider: str | None = None
    model: str | None = None

    @classmethod
    def for_tenant(cls, tenant_id: str | None) -> "ScopeFilter":
        """Restrict a search to a single tenant (no restriction if None)."""
        return cls(tenant_id=tenant_id or None)

    def conditions(self) -> dict[str, str]:
        """Return the set fields as a field -> value mapping."""
        fields = {
            "tenant_id": self.tenant_id,
            "user_id": self.user_id,
            "provider": self.provider,
            "model": self.model,
        }
        return {name: value for name, value in fields.items() if value is not None}

    @property
    def is_empty(self) -> bool:
        return not self.conditions()
