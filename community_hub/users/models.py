from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import CharField
from django.db.models import EmailField
from django.utils.translation import gettext_lazy as _

from community_hub.users.permissions import is_privileged

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class User(AbstractUser):
    """
    Default custom user model for community_hub.
    The actor role used by seats and realtime connections is derived from
    staff/superuser flags and the "Admin" group, see ``users.permissions``.
    """

    name = CharField(_("Display Name"), blank=True, max_length=255)
    email = EmailField(_("email address"), unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if not self.name:
            self.name = f"{self.first_name} {self.last_name}".strip() or self.username
        super().save(*args, **kwargs)

    @property
    def role(self) -> str:
        return ROLE_ADMIN if is_privileged(self) else ROLE_USER
