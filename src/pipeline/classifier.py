"""Field classification: system fields versus generic data fields.

Order of the rules matters and the first match wins:

1. agents: the reserved agents slug, or a person selector whose label
   mentions agents.
2. assignee user: a person selector that is not the team/agents slot and either
   carries the reserved assignee slug or a label mentioning "responsavel".
3. assignee team: a person selector that is not the assignee/agents slot and
   either carries the reserved team slug or a label mentioning "time" without
   "responsavel".
4. everything else is a generic field, rendered by type.

Slug matches always beat label matches. The label fallback is locale specific
and will misclassify fields whose labels are renamed or translated.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from enum import Enum

from .config import DEFAULT_CONFIG, EngineConfig
from .models import Field, FieldType, Step


class FieldRole(Enum):
    AGENTS = "agents"
    ASSIGNEE_USER = "assignee_user"
    ASSIGNEE_TEAM = "assignee_team"
    GENERIC = "generic"


class FieldWidget(Enum):
    CHECKLIST = "checklist"
    DATE = "date"
    LONG_TEXT = "long_text"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    TEXT = "text"


@dataclass(frozen=True)
class FieldClassification:
    role: FieldRole
    widget: FieldWidget | None = None

    @property
    def is_system(self) -> bool:
        return self.role is not FieldRole.GENERIC


def fold(text: str | None) -> str:
    """Lowercase and strip diacritics so "Responsável" matches "responsavel"."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _mentions(label: str, keywords: tuple[str, ...]) -> bool:
    return any(fold(k) in label for k in keywords)


def is_system_slug(key: str | None, config: EngineConfig = DEFAULT_CONFIG) -> bool:
    return bool(key) and key in config.system_slugs


def _generic_widget(fld: Field) -> FieldWidget:
    if fld.field_type is FieldType.CHECKLIST:
        return FieldWidget.CHECKLIST
    if fld.field_type is FieldType.DATE:
        return FieldWidget.DATE
    if fld.is_long_text:
        return FieldWidget.LONG_TEXT
    if fld.is_identifier:
        return FieldWidget.IDENTIFIER
    if fld.field_type is FieldType.NUMBER:
        return FieldWidget.NUMBER
    return FieldWidget.TEXT


def classify_field(fld: Field, config: EngineConfig = DEFAULT_CONFIG) -> FieldClassification:
    label = fold(fld.label)
    slug = fld.slug
    is_person = fld.field_type is FieldType.USER_SELECT

    if slug == config.agents_slug or (is_person and _mentions(label, config.agents_keywords)):
        return FieldClassification(FieldRole.AGENTS)

    if (
        is_person
        and slug not in (config.assigned_team_slug, config.agents_slug)
        and (slug == config.assigned_to_slug or _mentions(label, config.assignee_keywords))
    ):
        return FieldClassification(FieldRole.ASSIGNEE_USER)

    if (
        is_person
        and slug not in (config.assigned_to_slug, config.agents_slug)
        and (
            slug == config.assigned_team_slug
            or (
                _mentions(label, config.team_keywords)
                and not _mentions(label, config.assignee_keywords)
            )
        )
    ):
        return FieldClassification(FieldRole.ASSIGNEE_TEAM)

    return FieldClassification(FieldRole.GENERIC, _generic_widget(fld))


def classify_step_fields(
    step: Step | None, config: EngineConfig = DEFAULT_CONFIG
) -> list[tuple[Field, FieldClassification]]:
    """Classify every field declared on ``step`` in declaration order."""
    if step is None:
        return []
    return [(f, classify_field(f, config)) for f in step.fields]
