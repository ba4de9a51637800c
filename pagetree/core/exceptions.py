"""
Core Exceptions

Custom exceptions for the layout tree engine.

Every error carries a human readable ``message`` and the identifiers of the
nodes involved (``node_ids``), so callers can highlight the offending widgets.
"""

from collections.abc import Iterable


class LayoutError(Exception):
    """
    Base class for every error raised by the layout engine.

    Usage:
        try:
            engine.remove(node_id)
        except LayoutError as e:
            logger.warning(f"Edit rejected: {e.message}")
    """

    def __init__(self, message: str, node_ids: Iterable[str] = ()):
        self.message = message
        self.node_ids = tuple(node_ids)
        super().__init__(self.message)


class UnknownWidgetTypeError(LayoutError):
    """Raised when a widget type is not present in the widget registry."""

    def __init__(self, widget_type: str, node_ids: Iterable[str] = ()):
        self.widget_type = widget_type
        super().__init__(f"Unknown widget type: {widget_type!r}", node_ids)


class WidgetAlreadyRegisteredError(LayoutError):
    """Raised when registering a widget type twice."""

    def __init__(self, widget_type: str):
        self.widget_type = widget_type
        super().__init__(f"Widget type {widget_type!r} is already registered")


class NodeNotFoundError(LayoutError):
    """Raised when an operation references a node id that is not in the store."""

    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}", (node_id,))


class InvalidConfigError(LayoutError):
    """Raised when externally supplied widget configuration fails validation."""


class ChildrenNotAllowedError(LayoutError):
    """Raised when adding children to a widget whose type cannot hold any."""

    def __init__(self, node_id: str, widget_type: str):
        self.widget_type = widget_type
        super().__init__(
            f"Widget {node_id} of type {widget_type!r} cannot have children",
            (node_id,),
        )


# =============================================================================
# Decode failures
# =============================================================================


class LayoutDecodeError(LayoutError):
    """Base class for failures while turning a document back into a Layout."""


class UnsupportedVersionError(LayoutDecodeError):
    """Raised when a document carries a schema version the codec cannot read."""

    def __init__(self, version: object):
        self.version = version
        super().__init__(f"Unsupported layout schema version: {version!r}")


class MalformedDocumentError(LayoutDecodeError):
    """Raised when a document is not valid JSON or does not match the schema."""


class InvalidLayoutError(LayoutDecodeError):
    """
    Raised when a candidate tree breaks one of the structural invariants.

    Subclasses name the specific invariant.
    """


class DanglingReferenceError(InvalidLayoutError):
    """A root, child or parent reference points at a node that does not exist."""


class CycleDetectedError(InvalidLayoutError):
    """Following parent links from a node leads back to that node."""


class OrphanNodeError(InvalidLayoutError):
    """A node is neither in the root list nor in any node's child list."""


class DuplicateRootOrParentError(InvalidLayoutError):
    """A node is placed more than once, or its parent field disagrees with its placement."""
