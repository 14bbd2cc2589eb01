"""Reasons a preview could not be produced.

None of these leave the public API: the orchestrator catches them at its
boundary, logs the reason and reports plain absence.
"""


class PreviewError(Exception):
    """Base error for link preview extraction."""


class NoMatch(PreviewError):
    """Raised when text contains nothing that looks like a URL."""


class UnsupportedContentType(PreviewError):
    """Raised when the response is not ``text/html``."""

    def __init__(self, content_type):
        self.content_type = content_type
        super().__init__(f"Unsupported content type: {content_type!r}")


class TransportFailure(PreviewError):
    """Raised when no candidate request could be sent."""


class MalformedURI(PreviewError):
    """Raised when a URI cannot be parsed or turned into a request."""


class ParseFailure(PreviewError):
    """Raised when markup parsing or metadata extraction fails."""
