from __future__ import annotations

from django.contrib import admin

from hackcore.apps.hackathons.services.counters import schedule_counter_sync
from .models import HackathonRegistration, Team, TeamMember


class TeamMembersInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    fields = ("user", "role", "is_leader", "joined_at")
    readonly_fields = ("user", "joined_at")
    can_delete = False
    show_change_link = True


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "hackathon",
        "leader",
        "members_count",
        "max_size",
        "status",
        "created_at",
    )
    list_filter = ("hackathon", "status")
    search_fields = ("name", "leader__username", "leader__email")
    raw_id_fields = ("hackathon", "leader")
    inlines = [TeamMembersInline]

    def members_count(self, obj: Team) -> int:
        return obj.member_count()
    members_count.short_description = "Miembros"

    def save_model(self, request, obj: Team, form, change):
        super().save_model(request, obj, form, change)
        if not change:
            schedule_counter_sync(obj.hackathon_id, teams=True)

    # El borrado desde admin es acción del organizer: también resincroniza team_count
    def delete_model(self, request, obj: Team):
        hackathon_id = obj.hackathon_id
        super().delete_model(request, obj)
        schedule_counter_sync(hackathon_id, teams=True)

    def delete_queryset(self, request, queryset):
        hackathon_ids = set(queryset.values_list("hackathon_id", flat=True))
        super().delete_queryset(request, queryset)
        for hackathon_id in hackathon_ids:
            schedule_counter_sync(hackathon_id, teams=True)


@admin.register(HackathonRegistration)
class HackathonRegistrationAdmin(admin.ModelAdmin):
    list_display = ("user", "hackathon", "status", "created_at")
    list_filter = ("hackathon", "status")
    search_fields = ("user__username", "user__email", "hackathon__name")
    raw_id_fields = ("user", "hackathon")
