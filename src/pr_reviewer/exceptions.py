"""
Custom exceptions for the PR reviewer.
"""

from typing import Any


class PRReviewerError(Exception):
    """Base exception for every failure raised by the PR reviewer."""


class BitbucketAuthError(PRReviewerError):
    """No Bitbucket access token could be resolved.

    Raised when a request is about to be sent, never when a client is built.
    """


class BitbucketTransportError(PRReviewerError):
    """The request to Bitbucket failed before a response was received."""

    def __init__(self, message: str, *, method: str, url: str):
        super().__init__(message)
        self.method = method
        self.url = url


class BitbucketUpstreamError(PRReviewerError):
    """Bitbucket answered with something the caller cannot use.

    Covers non-2xx responses when strict status checking is enabled, bodies that
    are not JSON where JSON is required, and payloads missing required fields.
    """

    def __init__(
        self, message: str, *, status_code: int | None = None, response_body: Any | None = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class ReviewerAgentError(PRReviewerError):
    """The reviewing agent returned output that cannot be turned into comments."""
