from typing import Optional

from tracker.domain import Identity
from tracker.errors import PendingApproval, Unauthorized


def identity_for(user_id: str, email: str = "", config=None) -> Optional[Identity]:
    user_id = (user_id or "").strip()
    if not user_id:
        return None
    approved = True
    if config is not None and config.REQUIRE_APPROVAL:
        approved = user_id in config.APPROVED_USERS or email in config.APPROVED_USERS
    return Identity(user_id=user_id, email=email, approved=approved)


def check_access(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise Unauthorized("Sign in to continue")
    if not identity.approved:
        raise PendingApproval(f"{identity.email or identity.user_id} is waiting for approval")
    return identity
