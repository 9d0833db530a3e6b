from django.apps import AppConfig


class NumbermanConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "numberman"
    verbose_name = "Numberman - Phone Number Inventory"

    def ready(self):
        from numberman import handlers  # noqa: F401
