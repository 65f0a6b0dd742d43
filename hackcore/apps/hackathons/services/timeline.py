from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import List, Optional

from django.core.exceptions import ValidationError

DRAFT = "draft"
PUBLISHED = "published"
CANCELLED = "cancelled"

# Campos obligatorios para salir de borrador
PUBLISH_REQUIRED_FIELDS = ("hacking_start", "hacking_end", "submission_deadline")

TIMELINE_FIELDS = (
    "registration_start",
    "registration_end",
    "hacking_start",
    "hacking_end",
    "submission_deadline",
    "judging_start",
    "judging_end",
    "winners_announcement",
)

FIELD_LABELS = {
    "registration_start": "registration start",
    "registration_end": "registration end",
    "hacking_start": "hacking start",
    "hacking_end": "hacking end",
    "submission_deadline": "submission deadline",
    "judging_start": "judging start",
    "judging_end": "judging end",
    "winners_announcement": "winners announcement",
}


def normalize_declared_status(raw: Optional[str]) -> str:
    """
    El status persistido es la última escritura explícita (draft/cancelled) o
    un valor "publicado" (published o una fase cacheada). Se reduce a 3 valores.
    """
    value = (raw or DRAFT).strip().lower()
    if value == DRAFT:
        return DRAFT
    if value == CANCELLED:
        return CANCELLED
    return PUBLISHED


@dataclass(frozen=True)
class Timeline:
    registration_start: Optional[datetime] = None
    registration_end: Optional[datetime] = None
    hacking_start: Optional[datetime] = None
    hacking_end: Optional[datetime] = None
    submission_deadline: Optional[datetime] = None
    judging_start: Optional[datetime] = None
    judging_end: Optional[datetime] = None
    winners_announcement: Optional[datetime] = None
    declared_status: str = DRAFT

    def __post_init__(self):
        object.__setattr__(self, "declared_status", normalize_declared_status(self.declared_status))

    @classmethod
    def from_hackathon(cls, hackathon) -> "Timeline":
        values = {name: getattr(hackathon, name, None) for name in TIMELINE_FIELDS}
        return cls(declared_status=getattr(hackathon, "status", DRAFT), **values)

    def get(self, name: str) -> Optional[datetime]:
        if name not in TIMELINE_FIELDS:
            raise ValueError(f"Unknown timeline field: {name}")
        return getattr(self, name)

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def is_draft(self) -> bool:
        return self.declared_status == DRAFT

    @property
    def is_cancelled(self) -> bool:
        return self.declared_status == CANCELLED

    def missing_for_publish(self) -> List[str]:
        return [name for name in PUBLISH_REQUIRED_FIELDS if getattr(self, name) is None]

    def validate_for_publish(self) -> None:
        """
        Lanza ValidationError con TODOS los campos obligatorios ausentes
        (hacking_start, hacking_end, submission_deadline). Sin efectos laterales.
        """
        missing = self.missing_for_publish()
        if missing:
            raise ValidationError(
                {name: f"{FIELD_LABELS[name].capitalize()} is required to publish." for name in missing}
            )
