"""Exception hierarchy for the switch panel core."""


class PanelError(Exception):
    """Base exception for all switch panel errors."""


class AuthenticationError(PanelError):
    """Login failed or the session is no longer valid."""


class APIError(PanelError):
    """REST API request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DeviceMutationError(APIError):
    """Adding, updating, deleting or syncing a device failed."""


class RequestCancelled(PanelError):
    """The caller cancelled a request before its result was used."""


class SnapshotError(PanelError):
    """A status payload could not be normalized into a snapshot."""


class SectionError(PanelError):
    """A port section edit was rejected."""


class SettingsError(PanelError):
    """Environment or command-line settings failed validation."""
