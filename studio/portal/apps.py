from django.apps import AppConfig


class PortalConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'studio.portal'

    def ready(self):
        import studio.portal.cache  # noqa: F401
