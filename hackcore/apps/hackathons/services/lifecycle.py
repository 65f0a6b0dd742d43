from __future__ import annotations

import logging

from django.core.exceptions import ValidationError

from ..exceptions import AuthorizationError
from .phases import PHASE_CANCELLED, PHASE_DRAFT, resolve_phase
from .timeline import CANCELLED, DRAFT, PUBLISHED, Timeline

logger = logging.getLogger(__name__)

DECLARABLE_STATUSES = (DRAFT, PUBLISHED, CANCELLED)


def change_status(hackathon, new_status: str, *, is_organizer: bool):
    """
    Escritura explícita del organizer: draft / published / cancelled.
    Salir de borrador exige la línea de tiempo mínima; cancelled es terminal.
    """
    if not is_organizer:
        raise AuthorizationError("Only the organizer can change the hackathon status.")

    target = (new_status or "").strip().lower()
    if target not in DECLARABLE_STATUSES:
        raise ValidationError({"status": f"Unknown status '{new_status}'."})

    current = Timeline.from_hackathon(hackathon)
    if current.is_cancelled and target != CANCELLED:
        raise ValidationError({"status": "A cancelled hackathon cannot be reopened."})

    if target != DRAFT:
        current.validate_for_publish()

    hackathon.status = target
    hackathon.save(update_fields=["status", "updated_at"])
    logger.info("Hackathon %s status -> %s", hackathon.pk, target)
    return hackathon


def refresh_status_cache(hackathon, now) -> bool:
    """
    Escribe la fase resuelta en la columna status (cache de display).
    Draft y cancelled son escrituras del autor y no se tocan.
    """
    phase = resolve_phase(Timeline.from_hackathon(hackathon), now)
    if phase in (PHASE_DRAFT, PHASE_CANCELLED) or hackathon.status == phase:
        return False
    hackathon.status = phase
    hackathon.save(update_fields=["status", "updated_at"])
    logger.info("Hackathon %s status cache -> %s", hackathon.pk, phase)
    return True
