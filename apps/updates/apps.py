from django.apps import AppConfig


class UpdatesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.updates'
    verbose_name = 'Daily updates'
