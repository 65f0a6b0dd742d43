from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.text import slugify

from .services.phases import PHASE_CHOICES, resolve_phase
from .services.timeline import CANCELLED, DRAFT, PUBLISHED, Timeline


class Hackathon(models.Model):
    # status guarda la última escritura explícita (draft/published/cancelled)
    # o la fase cacheada por refresh_status_cache; nunca es fuente de verdad.
    STATUS_CHOICES = ((PUBLISHED, "Published"),) + PHASE_CHOICES

    name = models.CharField(max_length=160)
    slug = models.SlugField(unique=True)
    description = models.TextField(blank=True)
    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="organized_hackathons",
    )

    registration_start = models.DateTimeField(null=True, blank=True)
    registration_end = models.DateTimeField(null=True, blank=True)
    hacking_start = models.DateTimeField(null=True, blank=True)
    hacking_end = models.DateTimeField(null=True, blank=True)
    submission_deadline = models.DateTimeField(null=True, blank=True)
    judging_start = models.DateTimeField(null=True, blank=True)
    judging_end = models.DateTimeField(null=True, blank=True)
    winners_announcement = models.DateTimeField(null=True, blank=True)

    status = models.CharField(max_length=24, choices=STATUS_CHOICES, default=DRAFT)
    max_team_size = models.PositiveIntegerField(default=4)

    # Contadores denormalizados (solo display; ver services/counters.py)
    team_count = models.PositiveIntegerField(default=0)
    participant_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-hacking_start", "name")

    def __str__(self) -> str:
        return self.name

    @property
    def timeline(self) -> Timeline:
        return Timeline.from_hackathon(self)

    def phase_at(self, now) -> str:
        return resolve_phase(self.timeline, now)

    def clean(self):
        # cancelled es terminal, también para save() directo y el admin
        if self.pk and self.status != CANCELLED:
            stored = Hackathon.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            if stored == CANCELLED:
                raise ValidationError({"status": "A cancelled hackathon cannot be reopened."})
        # Fuera de borrador exige hacking_start, hacking_end y submission_deadline
        if self.status != DRAFT:
            self.timeline.validate_for_publish()

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        self.clean()
        super().save(*args, **kwargs)
