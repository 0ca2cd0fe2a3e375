from django.apps import AppConfig


class TillmanConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "tillman"
    verbose_name = "Tillman - Point of Sale & Loyalty Ledger"

    def ready(self):
        from tillman.services.sync import replay_on_reconnect
        from tillman.signals import connectivity_changed

        connectivity_changed.connect(
            replay_on_reconnect,
            dispatch_uid="tillman.replay_on_reconnect",
        )
