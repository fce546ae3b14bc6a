from rest_framework.permissions import SAFE_METHODS
from rest_framework.permissions import BasePermission

from community_hub.users.permissions import is_privileged


class IsAuthorOrPrivilegedCanWrite(BasePermission):
    """Anyone may read; only the recruit author or an admin may change it."""

    def has_object_permission(self, request, view, obj) -> bool:
        if request.method in SAFE_METHODS:
            return True
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        return obj.author_id == user.id or is_privileged(user)
