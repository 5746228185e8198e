from django.apps import AppConfig


class FfeConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'studio.ffe'
    verbose_name = 'FFE'

    def ready(self):
        import studio.ffe.signals  # noqa: F401
