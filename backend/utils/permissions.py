# backend/utils/permissions.py
from schemas.user import TokenUser
from utils.errors import UnauthorizedError


def check_permissions(request_user: TokenUser, resource_user_id) -> None:
    """Allow admins and the owner of the resource, reject everyone else.

    Ids are compared as strings: token claims carry them as text while
    database rows hold integers.
    """
    if request_user.is_admin:
        return
    if str(request_user.user_id) == str(resource_user_id):
        return
    raise UnauthorizedError("Unauthorized!")
