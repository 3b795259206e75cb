"""Failures surfaced by the Steam Web API client.

Codes mirror HTTP statuses so they read naturally in logs.
"""


class SteamAPIError(Exception):
    """Base class for everything the client raises on purpose."""
    code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Timeout(SteamAPIError):
    """No response at all from the Steam Web API."""
    code = 504


class BadResponse(SteamAPIError):
    """A response arrived but was malformed or missing an expected field."""
    code = 502


class NotFound(SteamAPIError):
    """Steam explicitly reported that the alias or profile does not exist."""
    code = 404

    def __init__(self, identifier: str, message: str | None = None):
        super().__init__(message or f'The specified profile "{identifier}" could not be found')
        self.identifier = identifier


class InvalidInput(SteamAPIError):
    """The caller supplied an identifier that can't possibly be valid."""
    code = 400
