"""
Authorization rules.

Pure checks over an Identity and an already-loaded row. Callers load the
target first so a missing row is reported as 404 before any 403.
Library rows need no rule here: every library query is scoped to the
caller's own user id.
"""

from mediatrack.errors import ForbiddenError
from mediatrack.models.user_model import Privacy, Role
from mediatrack.utils.token_utils import Identity


def require_role(identity: Identity, role: Role) -> None:
    if identity.role != role.value:
        raise ForbiddenError("Access denied. Admins only." if role is Role.ADMIN else "Access denied.")


def ensure_can_update_media(identity: Identity, media) -> None:
    if media.created_by != identity.id:
        raise ForbiddenError("You are not authorized to update this media")


def ensure_can_delete_media(identity: Identity, media) -> None:
    if media.created_by != identity.id and not identity.is_admin:
        raise ForbiddenError("You are not authorized to delete this media")


def ensure_can_update_comment(identity: Identity, comment) -> None:
    if comment.user_id != identity.id:
        raise ForbiddenError("You are not authorized to update this comment")


def ensure_can_delete_comment(identity: Identity, comment) -> None:
    if comment.user_id != identity.id and not identity.is_admin:
        raise ForbiddenError("You are not authorized to delete this comment")


def can_see_full_profile(identity: Identity, user) -> bool:
    return user.id == identity.id or identity.is_admin or user.privacy == Privacy.PUBLIC.value


def ensure_can_view_library(identity: Identity, owner) -> None:
    if not can_see_full_profile(identity, owner):
        raise ForbiddenError("This user's library is private")
