from django.apps import AppConfig


class JudgingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'hackcore.apps.judging'
