from django.http import JsonResponse
from django.utils import timezone


def health(request):
    return JsonResponse({"status": "ok", "time": timezone.now().isoformat()})
