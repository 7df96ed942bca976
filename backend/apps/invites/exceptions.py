"""Invite and registration exceptions."""


class InviteError(Exception):
    """Base exception for invite errors."""

    pass


class InviteNotUsableError(InviteError):
    """Raised when consuming a token that is expired or already used."""

    def __init__(self, state: str):
        super().__init__(f"Invite is {state}")
        self.state = state


class VerificationUnavailableError(Exception):
    """Raised when the command centre verification call cannot be made."""

    pass
