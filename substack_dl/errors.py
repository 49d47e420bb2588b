"""
Error taxonomy for the download pipeline.

Every failure the pipeline can report is a subclass of SubstackDLError.
The ``kind`` attribute is the short name shown to the user on the single
error line printed by the CLI.
"""

from __future__ import annotations


class SubstackDLError(Exception):
    """Base class for all pipeline failures."""

    kind = "Error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def __str__(self) -> str:
        return self.message


class InvalidInput(SubstackDLError):
    kind = "InvalidInput"


class NetworkError(SubstackDLError):
    kind = "NetworkError"


class FeedParseError(SubstackDLError):
    kind = "FeedParseError"


class MalformedLink(SubstackDLError):
    kind = "MalformedLink"


class InvalidDate(SubstackDLError):
    kind = "InvalidDate"


class DirectoryExists(SubstackDLError):
    kind = "DirectoryExists"


class CantDelete(SubstackDLError):
    kind = "CantDelete"


class WriteFailed(SubstackDLError):
    kind = "WriteFailed"


class InvalidConfig(SubstackDLError):
    kind = "InvalidConfig"
