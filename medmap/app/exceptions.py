class MedMapError(Exception):
    """Base class for errors raised by the mind map service."""


class DocumentError(MedMapError):
    """The uploaded document is empty or has no readable text."""


class UpstreamModelError(MedMapError):
    """The language model call failed or returned no text."""


class MalformedModelOutputError(MedMapError):
    """The model reply could not be parsed into the expected structure."""

    def __init__(self, message, raw_text=None):
        super().__init__(message)
        self.raw_text = raw_text


class SessionNotFoundError(MedMapError):
    pass


class NodeNotFoundError(MedMapError):
    pass


class NodeBusyError(MedMapError):
    """A verify/regenerate request is already running for this node."""


class ExportError(MedMapError):
    pass


class NodeChangedError(MedMapError):
    """The node was edited or removed while a request for it was running."""
