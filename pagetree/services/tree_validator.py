"""
Tree Validator

Pure checks of the structural invariants of a candidate layout tree:

1. No dangling references (roots, children and parents all exist)
2. Acyclicity (no node is its own ancestor)
3. Partition (each node placed exactly once: root list or one child list)
4. Bidirectional consistency (parent field matches placement)
5. Widget types are registered (and non-containers have no children)

The validator is a gate, not a repair mechanism: it never mutates its input,
and it terminates on any input (parent walks are bounded by the store size).
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from pagetree.core.exceptions import (
    ChildrenNotAllowedError,
    CycleDetectedError,
    DanglingReferenceError,
    DuplicateRootOrParentError,
    LayoutError,
    OrphanNodeError,
    UnknownWidgetTypeError,
)
from pagetree.models.contracts.layout import Layout, LayoutNode
from pagetree.services.widget_registry import WidgetLookup, WidgetRegistry


class ViolationKind(str, Enum):
    """Which invariant a tree breaks."""
    DANGLING_REFERENCE = "dangling_reference"
    CYCLE_DETECTED = "cycle_detected"
    DUPLICATE_ROOT_OR_PARENT = "duplicate_root_or_parent"
    ORPHAN_NODE = "orphan_node"
    UNKNOWN_WIDGET_TYPE = "unknown_widget_type"
    CHILDREN_NOT_ALLOWED = "children_not_allowed"


@dataclass(frozen=True)
class TreeViolation:
    """The first invariant violation found in a tree."""

    kind: ViolationKind
    message: str
    node_ids: tuple[str, ...] = field(default_factory=tuple)
    widget_type: str | None = None

    def to_error(self) -> LayoutError:
        """Build the exception matching this violation."""
        if self.kind is ViolationKind.UNKNOWN_WIDGET_TYPE:
            return UnknownWidgetTypeError(self.widget_type or "", self.node_ids)
        if self.kind is ViolationKind.CHILDREN_NOT_ALLOWED:
            return ChildrenNotAllowedError(self.node_ids[0], self.widget_type or "")
        error_class = _STRUCTURAL_ERRORS[self.kind]
        return error_class(self.message, self.node_ids)


_STRUCTURAL_ERRORS: dict[ViolationKind, type[LayoutError]] = {
    ViolationKind.DANGLING_REFERENCE: DanglingReferenceError,
    ViolationKind.CYCLE_DETECTED: CycleDetectedError,
    ViolationKind.DUPLICATE_ROOT_OR_PARENT: DuplicateRootOrParentError,
    ViolationKind.ORPHAN_NODE: OrphanNodeError,
}


# =============================================================================
# Individual checks
# =============================================================================


def _find_dangling(
    root_nodes: Sequence[str],
    nodes: Mapping[str, LayoutNode],
) -> TreeViolation | None:
    for root_id in root_nodes:
        if root_id not in nodes:
            return TreeViolation(
                ViolationKind.DANGLING_REFERENCE,
                f"Root node {root_id} not found in nodes",
                (root_id,),
            )

    for node_id, node in nodes.items():
        if node.parent is not None and node.parent not in nodes:
            return TreeViolation(
                ViolationKind.DANGLING_REFERENCE,
                f"Node {node_id} references non-existent parent {node.parent}",
                (node_id, node.parent),
            )
        for child_id in node.children:
            if child_id not in nodes:
                return TreeViolation(
                    ViolationKind.DANGLING_REFERENCE,
                    f"Node {node_id} references non-existent child {child_id}",
                    (node_id, child_id),
                )
    return None


def _find_cycle(nodes: Mapping[str, LayoutNode]) -> TreeViolation | None:
    # Nodes whose parent chain is known to end at a root
    terminated: set[str] = set()

    for start_id in nodes:
        path: list[str] = []
        on_path: set[str] = set()
        current: str | None = start_id

        # Each step adds a new id to on_path, so the walk is bounded by len(nodes)
        while current is not None and current not in terminated:
            if current in on_path:
                cycle = path[path.index(current):]
                return TreeViolation(
                    ViolationKind.CYCLE_DETECTED,
                    f"Node {current} is its own ancestor",
                    tuple(cycle),
                )
            path.append(current)
            on_path.add(current)
            current = nodes[current].parent

        terminated.update(path)
    return None


def _find_misplaced(
    root_nodes: Sequence[str],
    nodes: Mapping[str, LayoutNode],
) -> TreeViolation | None:
    # node id -> every place it appears (None = root list)
    placements: dict[str, list[str | None]] = {node_id: [] for node_id in nodes}
    for root_id in root_nodes:
        placements[root_id].append(None)
    for node_id, node in nodes.items():
        for child_id in node.children:
            placements[child_id].append(node_id)

    for node_id, places in placements.items():
        if not places:
            return TreeViolation(
                ViolationKind.ORPHAN_NODE,
                f"Node {node_id} is neither a root nor a child of any node",
                (node_id,),
            )
        if len(places) > 1:
            where = ", ".join("root list" if p is None else f"children of {p}" for p in places)
            return TreeViolation(
                ViolationKind.DUPLICATE_ROOT_OR_PARENT,
                f"Node {node_id} is placed more than once ({where})",
                (node_id,),
            )
        place = places[0]
        declared = nodes[node_id].parent
        if declared != place:
            if place is None:
                message = f"Root node {node_id} declares parent {declared}"
            else:
                message = f"Node {node_id} is a child of {place} but declares parent {declared}"
            involved = tuple(i for i in (node_id, place, declared) if i is not None)
            return TreeViolation(ViolationKind.DUPLICATE_ROOT_OR_PARENT, message, involved)
    return None


def _find_registry_violation(
    nodes: Mapping[str, LayoutNode],
    registry: WidgetLookup,
) -> TreeViolation | None:
    for node_id, node in nodes.items():
        if not registry.has_type(node.widget_type):
            return TreeViolation(
                ViolationKind.UNKNOWN_WIDGET_TYPE,
                f"Node {node_id} has unknown widget type {node.widget_type!r}",
                (node_id,),
                widget_type=node.widget_type,
            )
        if node.children and not registry.allows_children(node.widget_type):
            return TreeViolation(
                ViolationKind.CHILDREN_NOT_ALLOWED,
                f"Node {node_id} of type {node.widget_type!r} cannot have children",
                (node_id,),
                widget_type=node.widget_type,
            )
    return None


# =============================================================================
# Public API
# =============================================================================


def find_structural_violation(
    root_nodes: Sequence[str],
    nodes: Mapping[str, LayoutNode],
) -> TreeViolation | None:
    """Check references, acyclicity and placement only; widget types are not looked up."""
    # Dangling references first: later checks index into ``nodes`` freely
    violation = _find_dangling(root_nodes, nodes)
    if violation is None:
        violation = _find_cycle(nodes)
    if violation is None:
        violation = _find_misplaced(root_nodes, nodes)
    return violation


def find_violation(
    root_nodes: Sequence[str],
    nodes: Mapping[str, LayoutNode],
    registry: WidgetLookup | None = None,
) -> TreeViolation | None:
    """
    Check a candidate tree against every invariant.

    Args:
        root_nodes: Ordered root node ids
        nodes: Node store keyed by id
        registry: Widget lookup (standard widgets if omitted)

    Returns:
        The first violation found, or None if the tree is valid
    """
    if registry is None:
        registry = WidgetRegistry.with_standard_widgets()
    violation = find_structural_violation(root_nodes, nodes)
    if violation is None:
        violation = _find_registry_violation(nodes, registry)
    return violation


def validate_tree(
    root_nodes: Sequence[str],
    nodes: Mapping[str, LayoutNode],
    registry: WidgetLookup | None = None,
) -> None:
    """
    Raise the matching LayoutError if the tree breaks an invariant.

    Raises:
        DanglingReferenceError, CycleDetectedError, DuplicateRootOrParentError,
        OrphanNodeError, UnknownWidgetTypeError, ChildrenNotAllowedError
    """
    violation = find_violation(root_nodes, nodes, registry)
    if violation is not None:
        raise violation.to_error()


def validate_layout(layout: Layout, registry: WidgetLookup | None = None) -> None:
    """Convenience wrapper around validate_tree for a whole Layout."""
    validate_tree(layout.root_nodes, layout.nodes, registry)


def validate_structure(layout: Layout) -> None:
    """
    Raise if a layout breaks a structural invariant, without checking widget types.

    For layouts this package serialized itself (history snapshots).
    """
    violation = find_structural_violation(layout.root_nodes, layout.nodes)
    if violation is not None:
        raise violation.to_error()
