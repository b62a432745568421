"""Engine configuration."""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass
class EngineConfig:
    """Tunables for field classification and editor sessions."""

    assigned_to_slug: str = "assigned_to"
    assigned_team_slug: str = "assigned_team_id"
    agents_slug: str = "agents"
    agents_keywords: tuple[str, ...] = ("agents", "agentes")
    assignee_keywords: tuple[str, ...] = ("responsavel",)
    team_keywords: tuple[str, ...] = ("time",)
    saved_status_reset_seconds: float = 2.0
    last_update_format: str = "%d/%m"

    @property
    def system_slugs(self) -> frozenset[str]:
        return frozenset({self.assigned_to_slug, self.assigned_team_slug, self.agents_slug})

    @classmethod
    def from_dict(cls, data: dict | None) -> EngineConfig:
        """Build a config from a plain mapping, e.g. a board file's ``settings`` block."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown engine settings: {', '.join(unknown)}")
        values = dict(data)
        for key in ("agents_keywords", "assignee_keywords", "team_keywords"):
            if key in values:
                values[key] = tuple(values[key])
        return cls(**values)


DEFAULT_CONFIG = EngineConfig()
