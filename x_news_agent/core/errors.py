"""
Exception hierarchy for the agent pipeline.

FetchError and NotifyError abort a cycle and are caught at the cycle
boundary. ClassifyError is per post and never leaves the classifier.
"""

from __future__ import annotations

from typing import Literal


class XNewsAgentError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class FetchError(XNewsAgentError):
    """Timeline call failed or returned a non-success status."""

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code} - {self.message}"


class ClassifyError(XNewsAgentError):
    """Scoring a single post failed; the post is skipped."""

    def __init__(
        self,
        post_id: str,
        reason: Literal["scoring_failed", "unparsable"],
        message: str,
    ):
        self.post_id = post_id
        self.reason = reason
        super().__init__(message)


class NotifyError(XNewsAgentError):
    """Digest email could not be sent."""
