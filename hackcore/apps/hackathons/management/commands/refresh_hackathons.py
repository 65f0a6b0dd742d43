from __future__ import annotations

from datetime import timezone as dt_timezone

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from hackcore.apps.hackathons.models import Hackathon
from hackcore.apps.hackathons.services.counters import sync_participant_count, sync_team_count
from hackcore.apps.hackathons.services.lifecycle import refresh_status_cache


class Command(BaseCommand):
    help = "Refresca el status cacheado (fase) y los contadores denormalizados de los hackathons."

    def add_arguments(self, parser):
        parser.add_argument("--slug", type=str, default=None, help="Solo este hackathon.")
        parser.add_argument("--now", type=str, default=None, help="Instante ISO 8601 a usar como reloj (por defecto: ahora).")
        parser.add_argument("--skip-counters", dest="skip_counters", action="store_true")

    def handle(self, *args, **opts):
        now = timezone.now()
        if opts["now"]:
            now = parse_datetime(opts["now"])
            if now is None:
                raise CommandError(f"--now inválido: {opts['now']}")
            if timezone.is_naive(now):
                now = timezone.make_aware(now, dt_timezone.utc)

        qs = Hackathon.objects.all().order_by("id")
        if opts["slug"]:
            qs = qs.filter(slug=opts["slug"])
            if not qs.exists():
                raise CommandError(f"No existe Hackathon con slug={opts['slug']}")

        changed = 0
        for hackathon in qs:
            if refresh_status_cache(hackathon, now):
                changed += 1
                self.stdout.write(f"· {hackathon.slug}: {hackathon.status}")
            if not opts["skip_counters"]:
                sync_team_count(hackathon.pk)
                sync_participant_count(hackathon.pk)

        self.stdout.write(self.style.SUCCESS(f"✓ {changed} status actualizados ({qs.count()} hackathons)"))
