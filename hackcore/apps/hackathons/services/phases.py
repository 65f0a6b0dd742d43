# hackcore/apps/hackathons/services/phases.py
from __future__ import annotations

import logging
from datetime import datetime, timezone as dt_timezone
from typing import Callable, Dict, Optional

from ..exceptions import PhaseViolationError
from .timeline import FIELD_LABELS, Timeline

logger = logging.getLogger(__name__)

# ------------------------------
# Fases (derivadas, nunca fuente de verdad)
# ------------------------------
PHASE_DRAFT = "draft"
PHASE_UPCOMING = "upcoming"
PHASE_REGISTRATION_OPEN = "registration-open"
PHASE_REGISTRATION_CLOSED = "registration-closed"
PHASE_HACKING = "hacking"
PHASE_JUDGING = "judging"
PHASE_COMPLETED = "completed"
PHASE_CANCELLED = "cancelled"

# Orden total de las fases de un hackathon publicado
PHASE_ORDER = (
    PHASE_UPCOMING,
    PHASE_REGISTRATION_OPEN,
    PHASE_REGISTRATION_CLOSED,
    PHASE_HACKING,
    PHASE_JUDGING,
    PHASE_COMPLETED,
)

PHASE_CHOICES = (
    (PHASE_DRAFT, "Draft"),
    (PHASE_UPCOMING, "Upcoming"),
    (PHASE_REGISTRATION_OPEN, "Registration open"),
    (PHASE_REGISTRATION_CLOSED, "Registration closed"),
    (PHASE_HACKING, "Hacking"),
    (PHASE_JUDGING, "Judging"),
    (PHASE_COMPLETED, "Completed"),
    (PHASE_CANCELLED, "Cancelled"),
)


def phase_rank(phase: str) -> int:
    """Posición en PHASE_ORDER; draft/cancelled quedan fuera del orden (-1)."""
    try:
        return PHASE_ORDER.index(phase)
    except ValueError:
        return -1


def _instant(value) -> Optional[datetime]:
    # Valores que no son datetime se tratan como ausentes; naive se asume UTC
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=dt_timezone.utc)
    return value


def resolve_phase(timeline: Timeline, now: datetime) -> str:
    """
    Fase actual a partir de la línea de tiempo y del reloj explícito `now`.
    Primera regla que aplica gana; límite inferior inclusivo, superior exclusivo.
    Nunca lanza: con fechas faltantes o desordenadas degrada a la fase más conservadora.
    """
    if timeline.is_cancelled:
        return PHASE_CANCELLED
    if timeline.is_draft:
        return PHASE_DRAFT

    t = _instant(now)
    if t is None:
        return PHASE_UPCOMING

    reg_start = _instant(timeline.registration_start)
    reg_end = _instant(timeline.registration_end)
    hack_start = _instant(timeline.hacking_start)
    hack_end = _instant(timeline.hacking_end)
    judge_end = _instant(timeline.judging_end)

    if reg_start is None or t < reg_start:
        return PHASE_UPCOMING
    if reg_end is not None and t < reg_end:
        return PHASE_REGISTRATION_OPEN
    if hack_start is None or t < hack_start:
        return PHASE_REGISTRATION_CLOSED
    if hack_end is None or t < hack_end:
        return PHASE_HACKING
    if judge_end is None or t < judge_end:
        return PHASE_JUDGING
    return PHASE_COMPLETED


# ------------------------------
# Gates
# ------------------------------
def can_register(timeline: Timeline, now: datetime) -> bool:
    return resolve_phase(timeline, now) == PHASE_REGISTRATION_OPEN


def can_form_teams(timeline: Timeline, now: datetime) -> bool:
    return resolve_phase(timeline, now) in (
        PHASE_REGISTRATION_OPEN,
        PHASE_REGISTRATION_CLOSED,
        PHASE_HACKING,
    )


def can_submit(timeline: Timeline, now: datetime) -> bool:
    # El deadline es un corte más estricto que la fase
    if resolve_phase(timeline, now) not in (PHASE_HACKING, PHASE_JUDGING):
        return False
    deadline = _instant(timeline.submission_deadline)
    if deadline is not None and _instant(now) >= deadline:
        return False
    return True


def can_judge(timeline: Timeline, now: datetime) -> bool:
    return resolve_phase(timeline, now) == PHASE_JUDGING


def can_view_results(timeline: Timeline, now: datetime) -> bool:
    if timeline.is_draft or timeline.is_cancelled:
        return False
    winners_at = _instant(timeline.winners_announcement)
    t = _instant(now)
    if winners_at is None or t is None:
        return False
    return t >= winners_at


ACTION_REGISTER = "register"
ACTION_FORM_TEAMS = "form_teams"
ACTION_SUBMIT = "submit"
ACTION_JUDGE = "judge"
ACTION_VIEW_RESULTS = "view_results"

GATES: Dict[str, Callable[[Timeline, datetime], bool]] = {
    ACTION_REGISTER: can_register,
    ACTION_FORM_TEAMS: can_form_teams,
    ACTION_SUBMIT: can_submit,
    ACTION_JUDGE: can_judge,
    ACTION_VIEW_RESULTS: can_view_results,
}

ACTIONS = tuple(GATES)

# acción -> (etiqueta, campo de apertura, primera fase permitida)
_ACTION_WINDOWS = {
    ACTION_REGISTER: ("Registration", "registration_start", PHASE_REGISTRATION_OPEN),
    ACTION_FORM_TEAMS: ("Team formation", "registration_start", PHASE_REGISTRATION_OPEN),
    ACTION_SUBMIT: ("Submission", "hacking_start", PHASE_HACKING),
    ACTION_JUDGE: ("Judging", "hacking_end", PHASE_JUDGING),
    ACTION_VIEW_RESULTS: ("Results", "winners_announcement", None),
}


def _closing_field(action: str, timeline: Timeline) -> Optional[str]:
    if action == ACTION_REGISTER:
        return "registration_end"
    if action == ACTION_FORM_TEAMS:
        return "hacking_end"
    if action == ACTION_SUBMIT:
        # Sin deadline, las entregas siguen abiertas hasta el fin del juzgamiento
        if _instant(timeline.submission_deadline) is None:
            return "judging_end"
        return "submission_deadline"
    if action == ACTION_JUDGE:
        return "judging_end"
    return None


def format_instant(value: datetime) -> str:
    """Formato fijo en UTC, independiente del locale."""
    return _instant(value).astimezone(dt_timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def get_phase_message(timeline: Timeline, action: str, now: datetime) -> str:
    """
    Texto para el usuario explicando si la acción está disponible, nombrando el
    límite que la bloquea (campo + instante). Determinista para (timeline, action, now).
    """
    if action not in GATES:
        raise ValueError(f"Unknown action: {action}")

    if timeline.is_cancelled:
        return "This hackathon has been cancelled."
    if timeline.is_draft:
        return "This hackathon is still in draft."

    label, opening_field, first_phase = _ACTION_WINDOWS[action]
    closing_field = _closing_field(action, timeline)
    opening = _instant(timeline.get(opening_field))
    closing = _instant(timeline.get(closing_field)) if closing_field else None

    if GATES[action](timeline, now):
        if closing is not None:
            return f"{label} is open until {FIELD_LABELS[closing_field]} on {format_instant(closing)}."
        return f"{label} is open."

    if opening is None and closing is None:
        return f"{label} dates have not been set yet."

    if first_phase is None:
        # Resultados: nunca cierran, solo falta que abran
        if opening is None:
            return f"{label} dates have not been set yet."
        return f"{label} will be available at {FIELD_LABELS[opening_field]} on {format_instant(opening)}."

    # Cierre anterior a la apertura: la ventana no abre nunca
    if closing is not None and opening is not None and closing <= opening:
        t = _instant(now)
        if t is not None and t >= closing:
            return f"{label} closed at {FIELD_LABELS[closing_field]} on {format_instant(closing)}."
        return f"{label} is closed."

    if phase_rank(resolve_phase(timeline, now)) < phase_rank(first_phase):
        if opening is None:
            return f"{label} dates have not been set yet."
        return f"{label} opens at {FIELD_LABELS[opening_field]} on {format_instant(opening)}."

    if closing is None:
        return f"{label} is closed."
    return f"{label} closed at {FIELD_LABELS[closing_field]} on {format_instant(closing)}."


def ensure_allowed(timeline: Timeline, action: str, now: datetime) -> None:
    """Lanza PhaseViolationError (con el mensaje de get_phase_message) si la acción no está permitida."""
    if action not in GATES:
        raise ValueError(f"Unknown action: {action}")
    if GATES[action](timeline, now):
        return
    message = get_phase_message(timeline, action, now)
    logger.info("Phase violation: action=%s phase=%s (%s)", action, resolve_phase(timeline, now), message)
    raise PhaseViolationError(action, message)
