# mplus/domain/errors.py
"""
Business-rule violations raised by the domain and service layers.

Every error is a ValueError so callers that only care about "the request was
rejected" can catch that.
"""


class OrganizerError(ValueError):
    pass


class LockedError(OrganizerError):
    def __init__(self, lock_at: int):
        super().__init__("Signups are locked.")
        self.lock_at = lock_at


class SessionNotFound(OrganizerError):
    def __init__(self, session_id=None):
        if session_id is None:
            message = "No active session."
        else:
            message = f"Signup session {session_id} no longer exists."
        super().__init__(message)
        self.session_id = session_id


class DraftNotFound(OrganizerError):
    def __init__(self, session_id: str):
        super().__init__(f"No draft yet for session {session_id}.")
        self.session_id = session_id


class NotInDraft(OrganizerError):
    def __init__(self, participant_id: str):
        super().__init__(f"Participant {participant_id} is not in the draft (groups or bench).")
        self.participant_id = participant_id


class RoleMismatch(OrganizerError):
    def __init__(self, participant_id: str, slot: str):
        super().__init__(
            f"Moving {participant_id} into slot '{slot}' would break role eligibility. "
            "Retry with force to override."
        )
        self.participant_id = participant_id
        self.slot = slot


class RoleNotEligible(OrganizerError):
    def __init__(self, participant_id: str, role):
        super().__init__(f"Pick the {getattr(role, 'value', role)} role first.")
        self.participant_id = participant_id
        self.role = role


class InvalidSubAttribute(OrganizerError):
    def __init__(self, role, value):
        super().__init__(f"Class {value} cannot perform the {getattr(role, 'value', role)} role.")
        self.role = role
        self.value = value


class PermissionDenied(OrganizerError):
    def __init__(self):
        super().__init__("Officer-only.")


class InvalidRequest(OrganizerError):
    """Argument outside its allowed range."""
