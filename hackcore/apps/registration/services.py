# hackcore/apps/registration/services.py
"""
Mutaciones de inscripciones y equipos.

Cada operación recibe el rol ya resuelto (booleans) y el reloj explícito `now`;
primero se chequea el rol, luego el gate de fase, y solo entonces se escribe.
"""
from __future__ import annotations

from typing import Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from hackcore.apps.hackathons.exceptions import AuthorizationError, ConflictError
from hackcore.apps.hackathons.services.counters import schedule_counter_sync
from hackcore.apps.hackathons.services.phases import (
    ACTION_FORM_TEAMS,
    ACTION_REGISTER,
    ensure_allowed,
)
from .models import HackathonRegistration, Team, TeamMember

# Estados desde los que se puede volver a inscribir
REOPENABLE_REGISTRATION_STATUSES = ("cancelled", "rejected")


def _on_team(hackathon, user) -> bool:
    return TeamMember.objects.filter(team__hackathon=hackathon, user=user).exists()


# ------------------------------
# Inscripciones
# ------------------------------
def register_participant(hackathon, user, *, now) -> HackathonRegistration:
    ensure_allowed(hackathon.timeline, ACTION_REGISTER, now)

    with transaction.atomic():
        existing = (
            HackathonRegistration.objects.select_for_update()
            .filter(hackathon=hackathon, user=user)
            .first()
        )
        if existing is not None:
            if existing.status not in REOPENABLE_REGISTRATION_STATUSES:
                raise ConflictError("Already registered for this hackathon.")
            # Re-inscripción: se reactiva la fila cancelada/rechazada
            existing.status = "confirmed"
            existing.save(update_fields=["status", "updated_at"])
            registration = existing
        else:
            try:
                with transaction.atomic():
                    registration = HackathonRegistration.objects.create(
                        hackathon=hackathon, user=user, status="confirmed"
                    )
            except IntegrityError:
                raise ConflictError("Already registered for this hackathon.")

        schedule_counter_sync(hackathon.pk, participants=True)
    return registration


def cancel_registration(hackathon, user) -> HackathonRegistration:
    with transaction.atomic():
        registration = (
            HackathonRegistration.objects.select_for_update()
            .filter(hackathon=hackathon, user=user)
            .first()
        )
        if registration is None or registration.status == "cancelled":
            raise ConflictError("You are not registered for this hackathon.")
        registration.status = "cancelled"
        registration.save(update_fields=["status", "updated_at"])
        schedule_counter_sync(hackathon.pk, participants=True)
    return registration


def set_registration_status(registration: HackathonRegistration, status: str, *, is_organizer: bool):
    """Moderación del organizer (aprobar, rechazar, confirmar...)."""
    if not is_organizer:
        raise AuthorizationError("Only the organizer can moderate registrations.")
    valid = {value for value, _label in HackathonRegistration.STATUS_CHOICES}
    if status not in valid:
        raise ValidationError({"status": f"Unknown registration status '{status}'."})

    with transaction.atomic():
        registration.status = status
        registration.save(update_fields=["status", "updated_at"])
        schedule_counter_sync(registration.hackathon_id, participants=True)
    return registration


# ------------------------------
# Equipos
# ------------------------------
def create_team(
    hackathon,
    leader,
    name: str,
    *,
    description: str = "",
    max_size: Optional[int] = None,
    join_password: str = "",
    role: str = "Developer",
    now,
) -> Team:
    name = (name or "").strip()
    if not name:
        raise ValidationError({"name": "Team name is required."})
    if max_size is None:
        max_size = hackathon.max_team_size
    if max_size < 1:
        raise ValidationError({"max_size": "Team size must be at least 1."})

    ensure_allowed(hackathon.timeline, ACTION_FORM_TEAMS, now)

    if _on_team(hackathon, leader):
        raise ConflictError("You are already on a team for this hackathon.")

    try:
        with transaction.atomic():
            team = Team.objects.create(
                hackathon=hackathon,
                name=name,
                description=description,
                leader=leader,
                max_size=max_size,
                join_password=join_password or "",
                status="complete" if max_size == 1 else "forming",
            )
            # el creador queda inscrito como líder
            TeamMember.objects.create(team=team, user=leader, role=role, is_leader=True)
            schedule_counter_sync(hackathon.pk, teams=True)
    except IntegrityError:
        raise ConflictError(f"A team named '{name}' already exists for this hackathon.")
    return team


def join_team(team: Team, user, password: Optional[str] = None, *, role: str = "Developer", now) -> TeamMember:
    hackathon = team.hackathon
    ensure_allowed(hackathon.timeline, ACTION_FORM_TEAMS, now)

    if team.join_password and password != team.join_password:
        raise AuthorizationError("Incorrect team password.")

    with transaction.atomic():
        team = Team.objects.select_for_update().get(pk=team.pk)
        if _on_team(hackathon, user):
            raise ConflictError("You are already on a team for this hackathon.")
        current = team.member_count()
        if current >= team.max_size:
            raise ConflictError("Team is full.")

        member = TeamMember.objects.create(team=team, user=user, role=role, is_leader=False)
        if current + 1 >= team.max_size and team.status != "complete":
            team.status = "complete"
            team.save(update_fields=["status"])
    return member


def leave_team(team: Team, user, *, now) -> None:
    ensure_allowed(team.hackathon.timeline, ACTION_FORM_TEAMS, now)

    with transaction.atomic():
        team = Team.objects.select_for_update().get(pk=team.pk)
        member = TeamMember.objects.filter(team=team, user=user).first()
        if member is None:
            raise ConflictError("You are not a member of this team.")
        if member.is_leader:
            raise ConflictError("The team leader cannot leave the team.")
        member.delete()
        if team.status == "complete":
            team.status = "forming"
            team.save(update_fields=["status"])


def delete_team(team: Team, *, is_organizer: bool) -> None:
    """Único borrado físico permitido: acción explícita del organizer."""
    if not is_organizer:
        raise AuthorizationError("Only the organizer can delete teams.")
    hackathon_id = team.hackathon_id
    with transaction.atomic():
        team.delete()
        schedule_counter_sync(hackathon_id, teams=True)
