from __future__ import annotations

from django.contrib import admin

from .models import Score, Submission
from .services.scoring import recalculate_average


class ScoresInline(admin.TabularInline):
    model = Score
    extra = 0
    fields = ("judge", "total_score", "flagged", "scored_at")
    readonly_fields = ("judge", "total_score", "flagged", "scored_at")
    can_delete = False


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ("project_name", "team", "hackathon", "status", "submitted_at", "average_score", "scores_count")
    list_filter = ("hackathon", "status")
    search_fields = ("project_name", "team__name")
    raw_id_fields = ("hackathon", "team")
    # average_score es derivado: solo lo escribe el agregador
    readonly_fields = ("average_score", "created_at")
    inlines = [ScoresInline]
    actions = ("recalculate",)

    def scores_count(self, obj: Submission) -> int:
        return obj.scores.count()
    scores_count.short_description = "Scores"

    @admin.action(description="Recalcular promedio")
    def recalculate(self, request, queryset):
        for submission_id in queryset.values_list("id", flat=True):
            recalculate_average(submission_id)
        self.message_user(request, "Promedios recalculados.")


@admin.register(Score)
class ScoreAdmin(admin.ModelAdmin):
    list_display = ("submission", "judge", "total_score", "flagged", "scored_at")
    list_filter = ("flagged", "submission__hackathon")
    search_fields = ("submission__project_name", "judge__username")
    raw_id_fields = ("submission", "judge")

    # Los scores pertenecen al juez: el admin solo los lee
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    # Borrar un score debe recalcular el promedio: solo via withdraw_score
    def has_delete_permission(self, request, obj=None):
        return False
