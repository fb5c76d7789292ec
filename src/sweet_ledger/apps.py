from django.apps import AppConfig


class SweetLedgerConfig(AppConfig):
    name = "sweet_ledger"
    label = "sweet_ledger"
    default_auto_field = "django.db.models.BigAutoField"
    verbose_name = "Sweet shop stock ledger"
