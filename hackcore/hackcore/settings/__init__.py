# Por defecto desarrollo; prod vía DJANGO_SETTINGS_MODULE=hackcore.hackcore.settings.prod
from .base import *  # noqa: F401,F403
