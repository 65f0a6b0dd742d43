from __future__ import annotations

from django.conf import settings
from django.db import models

from hackcore.apps.hackathons.models import Hackathon


class Team(models.Model):
    STATUS_CHOICES = (
        ("forming", "Forming"),
        ("complete", "Complete"),
    )

    hackathon = models.ForeignKey(Hackathon, on_delete=models.CASCADE, related_name="teams")
    name = models.CharField(max_length=160)
    description = models.TextField(blank=True)
    leader = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="led_teams")
    max_size = models.PositiveIntegerField(default=4)
    join_password = models.CharField(max_length=64, blank=True, default="")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="forming")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = (("hackathon", "name"),)
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return f"{self.name} · {self.hackathon}"

    def member_count(self) -> int:
        return self.members.count()

    def is_full(self) -> bool:
        return self.member_count() >= self.max_size


class TeamMember(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="members")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="team_memberships")
    role = models.CharField(max_length=64, blank=True, default="Developer")
    is_leader = models.BooleanField(default=False)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = (("team", "user"),)
        ordering = ("joined_at", "id")

    def __str__(self) -> str:
        return f"{self.user} -> {self.team.name}"


class HackathonRegistration(models.Model):
    """
    Inscripción de un usuario a un hackathon. No se borra: se cancela o se
    rechaza (status), y puede re-activarse.
    """
    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
        ("confirmed", "Confirmed"),
        ("cancelled", "Cancelled"),
    )

    hackathon = models.ForeignKey(Hackathon, on_delete=models.CASCADE, related_name="registrations")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="hackathon_registrations")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="confirmed")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("hackathon", "user"),)
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return f"{self.user} · {self.hackathon} ({self.status})"
