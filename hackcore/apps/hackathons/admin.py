from __future__ import annotations

from django.contrib import admin
from django.utils import timezone

from .models import Hackathon
from .services.lifecycle import refresh_status_cache


@admin.register(Hackathon)
class HackathonAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "organizer",
        "status",
        "current_phase",
        "hacking_start",
        "submission_deadline",
        "team_count",
        "participant_count",
    )
    list_filter = ("status",)
    search_fields = ("name", "slug", "organizer__username")
    raw_id_fields = ("organizer",)
    readonly_fields = ("team_count", "participant_count", "created_at", "updated_at")
    actions = ("refresh_status",)

    def current_phase(self, obj: Hackathon) -> str:
        return obj.phase_at(timezone.now())
    current_phase.short_description = "Fase actual"

    @admin.action(description="Refrescar status desde la línea de tiempo")
    def refresh_status(self, request, queryset):
        now = timezone.now()
        changed = sum(1 for h in queryset if refresh_status_cache(h, now))
        self.message_user(request, f"{changed} hackathon(s) actualizados.")
