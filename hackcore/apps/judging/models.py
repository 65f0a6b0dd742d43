# hackcore/apps/judging/models.py
from __future__ import annotations

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Submission(models.Model):
    STATUS_CHOICES = (
        ("draft", "Draft"),
        ("submitted", "Submitted"),
    )

    hackathon = models.ForeignKey(
        "hackathons.Hackathon",
        on_delete=models.CASCADE,
        related_name="submissions",
    )
    team = models.ForeignKey(
        "registration.Team",
        on_delete=models.CASCADE,
        related_name="submissions",
    )
    project_name = models.CharField(max_length=160)
    tagline = models.CharField(max_length=240, blank=True)
    description = models.TextField(blank=True)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="draft")
    submitted_at = models.DateTimeField(null=True, blank=True)

    # Derivado: media exacta de los scores vigentes (ver services/scoring.py)
    average_score = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return f"{self.project_name} · {self.team.name}"


class Score(models.Model):
    """
    Puntaje de un juez para un submission. Una sola fila por (submission, judge):
    el juez la actualiza (upsert), nunca se duplica.
    """
    submission = models.ForeignKey(Submission, on_delete=models.CASCADE, related_name="scores")
    judge = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="scores")

    criteria = models.JSONField(default=list, blank=True)  # opaco para el agregador
    total_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    overall_feedback = models.TextField(blank=True, default="")
    flagged = models.BooleanField(default=False)
    scored_at = models.DateTimeField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("submission", "judge"), name="uniq_submission_judge"),
        ]
        ordering = ("submission_id", "scored_at", "id")

    def __str__(self) -> str:
        return f"{self.submission} · {self.judge} = {self.total_score}"
