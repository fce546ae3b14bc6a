"""Role helpers shared by the HTTP surface and the realtime router."""

from collections.abc import Iterable

from rest_framework.permissions import BasePermission

GROUP_ADMIN = "Admin"


def _user_in_groups(user, names: Iterable[str]) -> bool:
    groups = getattr(user, "groups", None)
    names_list = list(names)
    if not groups or not names_list:
        return False
    return groups.filter(name__in=names_list).exists()


def is_privileged(user) -> bool:
    """Elevated role: may book restricted seats and release any seat."""
    if not (user and getattr(user, "is_authenticated", False)):
        return False
    return bool(
        getattr(user, "is_superuser", False)
        or getattr(user, "is_staff", False)
        or _user_in_groups(user, [GROUP_ADMIN])
    )


class IsPrivileged(BasePermission):
    """Allow access only to staff or users in the Admin group."""

    def has_permission(self, request, view) -> bool:
        return is_privileged(getattr(request, "user", None))
