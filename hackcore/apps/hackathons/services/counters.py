# hackcore/apps/hackathons/services/counters.py
"""
Contadores denormalizados (team_count, participant_count) del hackathon.

Son cache de display: consistencia eventual, nunca los leen las fases ni los gates.
Cualquier fallo se registra y se descarta; la operación que los dispara ya fue exitosa.
"""
from __future__ import annotations

import logging
from functools import partial

from django.db import transaction

logger = logging.getLogger(__name__)

# Inscripciones que cuentan como participante
LIVE_REGISTRATION_STATUSES = ("pending", "approved", "confirmed")


def sync_team_count(hackathon_id: int) -> int | None:
    from hackcore.apps.hackathons.models import Hackathon  # import local para evitar ciclos
    from hackcore.apps.registration.models import Team

    try:
        count = Team.objects.filter(hackathon_id=hackathon_id).count()
        Hackathon.objects.filter(pk=hackathon_id).update(team_count=count)
    except Exception:
        logger.exception("team_count sync failed for hackathon %s", hackathon_id)
        return None
    logger.info("team_count for hackathon %s -> %s", hackathon_id, count)
    return count


def sync_participant_count(hackathon_id: int) -> int | None:
    from hackcore.apps.hackathons.models import Hackathon
    from hackcore.apps.registration.models import HackathonRegistration

    try:
        count = HackathonRegistration.objects.filter(
            hackathon_id=hackathon_id, status__in=LIVE_REGISTRATION_STATUSES
        ).count()
        Hackathon.objects.filter(pk=hackathon_id).update(participant_count=count)
    except Exception:
        logger.exception("participant_count sync failed for hackathon %s", hackathon_id)
        return None
    logger.info("participant_count for hackathon %s -> %s", hackathon_id, count)
    return count


def _run_sync(hackathon_id: int, teams: bool, participants: bool) -> None:
    if teams:
        sync_team_count(hackathon_id)
    if participants:
        sync_participant_count(hackathon_id)


def schedule_counter_sync(hackathon_id: int, *, teams: bool = False, participants: bool = False) -> None:
    """
    Agenda el recálculo para después del commit de la transacción actual
    (inmediato si no hay transacción abierta). Si la transacción hace rollback, no corre.
    """
    if not (teams or participants):
        return
    transaction.on_commit(partial(_run_sync, hackathon_id, teams, participants))
