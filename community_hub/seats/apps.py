from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class SeatsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "community_hub.seats"
    verbose_name = _("Seats")
