from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class RecruitsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "community_hub.recruits"
    verbose_name = _("Recruits")
