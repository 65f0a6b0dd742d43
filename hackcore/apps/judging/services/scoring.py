# hackcore/apps/judging/services/scoring.py
"""
Agregador de puntajes.

Invariante: Submission.average_score es siempre la media exacta (2 decimales,
redondeo estándar) de TODOS los Score vigentes del submission.

El recálculo es "leer todo, calcular, escribir", así que se serializa por
submission: sección crítica en proceso (locks.submission_lock) + transacción
atómica con la fila del submission bloqueada (select_for_update). Así una
escritura con un snapshot viejo nunca pisa a una con el set completo.
"""
from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, connection, transaction

from hackcore.apps.hackathons.exceptions import AuthorizationError, ConflictError, PersistenceError
from hackcore.apps.hackathons.services.phases import ACTION_JUDGE, ACTION_SUBMIT, ensure_allowed
from ..models import Score, Submission
from .locks import submission_lock

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
MIN_SCORE = Decimal("0")
MAX_SCORE = Decimal("100")


# ------------------------------
# Validación de entradas
# ------------------------------
def _clean_total_score(value: Any) -> Decimal:
    # bool es int en Python; no es un puntaje
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValidationError({"total_score": "Total score must be a number."})
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError({"total_score": "Total score must be a finite number."})
    try:
        score = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError({"total_score": "Total score must be a number."})
    if not score.is_finite():
        raise ValidationError({"total_score": "Total score must be a finite number."})
    if score < MIN_SCORE or score > MAX_SCORE:
        raise ValidationError({"total_score": "Total score must be between 0 and 100."})
    return score.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _clean_criteria(value: Any) -> list:
    if not isinstance(value, (list, tuple)):
        raise ValidationError({"criteria": "Criteria must be a list."})
    return list(value)


# ------------------------------
# Sección transaccional por submission
# ------------------------------
def _lock_timeout() -> float:
    return float(getattr(settings, "HACKCORE_SCORE_LOCK_TIMEOUT", 5))


def _apply_db_lock_timeout(timeout: float) -> None:
    # Solo PostgreSQL; SQLite ya serializa escrituras y aquí manda el lock en proceso
    if connection.vendor != "postgresql":
        return
    with connection.cursor() as cursor:
        cursor.execute("SELECT set_config('lock_timeout', %s, true)", [f"{int(timeout * 1000)}ms"])


@contextmanager
def _scoring_section(submission_id: int):
    # durable: el commit ocurre antes de soltar el lock, nunca en una transacción externa
    timeout = _lock_timeout()
    with submission_lock(submission_id, timeout):
        try:
            with transaction.atomic(durable=True):
                _apply_db_lock_timeout(timeout)
                submission = Submission.objects.select_for_update().filter(pk=submission_id).first()
                if submission is None:
                    raise ValidationError({"submission": f"Submission {submission_id} does not exist."})
                yield submission
        except DatabaseError as exc:
            logger.exception("Score transaction failed for submission %s", submission_id)
            raise PersistenceError(f"Could not update scores for submission {submission_id}.") from exc


def _recalculate(submission: Submission) -> Optional[Decimal]:
    totals = list(Score.objects.filter(submission_id=submission.pk).values_list("total_score", flat=True))
    if totals:
        average = (sum(totals, Decimal("0")) / len(totals)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    else:
        average = None
    Submission.objects.filter(pk=submission.pk).update(average_score=average)
    submission.average_score = average
    return average


# ------------------------------
# API pública
# ------------------------------
def recalculate_average(submission_id: int) -> Optional[Decimal]:
    """
    Recálculo completo desde las filas de Score (no incremental); idempotente.
    Devuelve el nuevo promedio, o None si no hay scores.
    """
    with _scoring_section(submission_id) as submission:
        average = _recalculate(submission)
    logger.info("Submission %s average -> %s", submission_id, average)
    return average


def record_score(
    submission_id: int,
    judge,
    criteria,
    total_score,
    feedback: str = "",
    flagged: bool = False,
    *,
    is_assigned_judge: bool,
    now,
) -> Score:
    """
    Inserta o reemplaza la fila (submission, judge) y recalcula el promedio en
    la misma transacción. Validación antes de cualquier escritura; el gate de
    juzgamiento se evalúa dentro de la sección crítica.
    """
    score_value = _clean_total_score(total_score)
    criteria = _clean_criteria(criteria)
    if not is_assigned_judge:
        raise AuthorizationError("Only judges assigned to this hackathon can score submissions.")

    with _scoring_section(submission_id) as submission:
        ensure_allowed(submission.hackathon.timeline, ACTION_JUDGE, now)
        score, created = Score.objects.update_or_create(
            submission=submission,
            judge=judge,
            defaults={
                "criteria": criteria,
                "total_score": score_value,
                "overall_feedback": feedback or "",
                "flagged": bool(flagged),
                "scored_at": now,
            },
        )
        average = _recalculate(submission)

    logger.info(
        "Score %s by judge %s on submission %s = %s (average %s)",
        "recorded" if created else "updated",
        getattr(judge, "pk", judge),
        submission_id,
        score_value,
        average,
    )
    return score


def withdraw_score(submission_id: int, judge, *, is_assigned_judge: bool, now) -> Optional[Decimal]:
    """El juez retira su propio puntaje durante el juzgamiento; devuelve el nuevo promedio."""
    if not is_assigned_judge:
        raise AuthorizationError("Only judges assigned to this hackathon can withdraw scores.")

    with _scoring_section(submission_id) as submission:
        ensure_allowed(submission.hackathon.timeline, ACTION_JUDGE, now)
        deleted, _ = Score.objects.filter(submission=submission, judge=judge).delete()
        if not deleted:
            raise ConflictError("You have not scored this submission.")
        average = _recalculate(submission)

    logger.info("Score withdrawn by judge %s on submission %s (average %s)", getattr(judge, "pk", judge), submission_id, average)
    return average


# ------------------------------
# Submissions
# ------------------------------
def create_submission(team, project_name: str, *, tagline: str = "", description: str = "", is_team_member: bool) -> Submission:
    """Borrador de entrega; no depende de la fase (solo la entrega final)."""
    if not is_team_member:
        raise AuthorizationError("You must be a team member to create a submission.")
    project_name = (project_name or "").strip()
    if not project_name:
        raise ValidationError({"project_name": "Project name is required."})
    return Submission.objects.create(
        hackathon=team.hackathon,
        team=team,
        project_name=project_name,
        tagline=tagline,
        description=description,
        status="draft",
    )


def submit_project(submission: Submission, *, is_team_member: bool, now) -> Submission:
    if not is_team_member:
        raise AuthorizationError("You must be a team member to submit this project.")
    ensure_allowed(submission.hackathon.timeline, ACTION_SUBMIT, now)

    submission.status = "submitted"
    submission.submitted_at = now
    submission.save(update_fields=["status", "submitted_at"])
    logger.info("Submission %s submitted at %s", submission.pk, now)
    return submission
