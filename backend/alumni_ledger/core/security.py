from collections.abc import Iterable

from fastapi import HTTPException, status

from alumni_ledger.models.enums import EntryKind, RoleName
from alumni_ledger.models.user import User
from alumni_ledger.services.approval import ActingUser
from alumni_ledger.services.entries import LedgerEntry


APPROVER_ROLES = (RoleName.admin, RoleName.treasurer)


def require_roles(user: User, allowed_roles: Iterable[RoleName]) -> None:
    allowed = {role.value for role in set(allowed_roles)}
    if user.role == RoleName.admin:
        return
    if user.role.value in allowed:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Insufficient role privileges.",
    )


def is_approver(user: User) -> bool:
    return user.role in APPROVER_ROLES


def acting_user_for(user: User) -> ActingUser:
    return ActingUser(id=user.id, role=user.role, name=user.full_name)


def require_entry_visible(user: User, entry: LedgerEntry) -> None:
    if is_approver(user):
        return
    if entry.submitted_by == user.id or entry.member_id == user.id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You can only view your own entries.",
    )


def require_entry_editable(user: User, entry: LedgerEntry) -> None:
    """Admins edit anything; a submitter may edit their own pending expense."""
    if user.role == RoleName.admin:
        return
    # Pending-only is enforced by the state machine, which answers 409.
    if entry.kind == EntryKind.expense and entry.submitted_by == user.id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You can only edit your own pending expenses.",
    )
