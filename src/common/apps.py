from django.apps import AppConfig


class CommonConfig(AppConfig):
    """Shared base models, schemas, auth and throttling."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "common"
    verbose_name = "Common"
