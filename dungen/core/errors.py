"""Exception types shared across the dungen package."""


class DungenError(Exception):
    """Base class for all dungen errors."""
    pass


class TextGenerationError(DungenError):
    """Raised when a text-generation backend fails to produce output."""
    pass


class GraphIntegrityError(DungenError):
    """Raised when an edge references a node that is not in the graph."""
    pass
