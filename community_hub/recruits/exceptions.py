from django.utils.translation import gettext_lazy as _

from community_hub.core.exceptions import Conflict
from community_hub.core.exceptions import NotFound
from community_hub.core.exceptions import PermissionDenied


class RecruitNotFound(NotFound):
    default_detail = _("Recruit not found.")
    default_code = "recruit_not_found"


class RecruitClosed(Conflict):
    default_detail = _("Recruiting is closed.")
    default_code = "closed"


class AlreadyMember(Conflict):
    default_detail = _("Already a team member.")
    default_code = "already_member"


class AlreadyPending(Conflict):
    default_detail = _("Already applied to this team.")
    default_code = "already_pending"


class RecruitFull(Conflict):
    default_detail = _("The team is full.")
    default_code = "full"


class NotPending(Conflict):
    default_detail = _("No pending application for this user.")
    default_code = "not_pending"


class NotAuthor(PermissionDenied):
    default_detail = _("Only the recruit author can do this.")
    default_code = "not_author"


class NotTeamMember(PermissionDenied):
    default_detail = _("Only team members can use the team chat.")
    default_code = "not_team_member"
