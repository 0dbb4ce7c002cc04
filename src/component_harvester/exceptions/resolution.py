"""Resolution errors: malformed input, missing ancestors, failed fetches."""

from pathlib import Path
from typing import Optional, Union

from .base import HarvesterError


class ResolutionError(HarvesterError):
    """Base class for errors raised while resolving a component."""

    pass


class FormatError(ResolutionError):
    """Raised when a version string or descriptor is malformed.

    The caller-supplied ``label`` leads the message so the offending
    operation can be identified in logs.
    """

    def __init__(self, label: str, value: str, reason: Optional[str] = None):
        details = {"value": value}
        if reason:
            details["reason"] = reason
        super().__init__(f"{label}: {value}", details=details)
        self.label = label
        self.value = value
        self.reason = reason


class ParseError(FormatError):
    """Raised when a descriptor file cannot be parsed."""

    def __init__(self, location: Union[str, Path], reason: str):
        super().__init__("Malformed descriptor", str(location), reason)
        self.location = location


class NotFoundError(ResolutionError):
    """Raised when a registry reports that a component does not exist."""

    def __init__(self, identity: str):
        super().__init__(f"Component not found: {identity}", details={"identity": identity})
        self.identity = identity


class FetchError(ResolutionError):
    """Raised when a registry fetch fails for any reason other than not-found."""

    def __init__(self, identity: str, reason: str, status: Optional[int] = None):
        details = {"identity": identity, "reason": reason}
        if status is not None:
            details["status"] = str(status)
        super().__init__(f"Failed to fetch {identity}", details=details)
        self.identity = identity
        self.reason = reason
        self.status = status
