"""
YourTales Backend - Permission Predicates
==========================================

What:  Pure boolean checks used by the services before mutating state.
How:   Each predicate looks at a manuscript (with its collaborations already
       loaded) or a single collaboration. No I/O happens here.

    is_author           manuscript.author_id == user_id
    is_accepted_editor  an ACCEPTED collaboration with role EDITOR for user_id
    can_edit            is_author or is_accepted_editor
    is_invitee          invitation addressed to the user's email or user id
"""

from yourtales.models.enums import CollaborationRole, CollaborationStatus
from yourtales.models.manuscript import Collaboration, Manuscript
from yourtales.models.user import User


def is_author(manuscript: Manuscript, user_id: int) -> bool:
    return manuscript.author_id == user_id


def is_accepted_editor(manuscript: Manuscript, user_id: int) -> bool:
    """Requires manuscript.collaborations to be loaded (selectinload)."""
    return any(
        c.user_id == user_id
        and c.role == CollaborationRole.EDITOR
        and c.status == CollaborationStatus.ACCEPTED
        for c in manuscript.collaborations
    )


def can_edit(manuscript: Manuscript, user_id: int) -> bool:
    return is_author(manuscript, user_id) or is_accepted_editor(manuscript, user_id)


def is_invitee(collaboration: Collaboration, user: User) -> bool:
    # Emails are compared case-insensitively
    if collaboration.user_id is not None and collaboration.user_id == user.id:
        return True
    return collaboration.email.lower() == (user.email or "").lower()
