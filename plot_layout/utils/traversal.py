"""
Traversal helpers over resolved NodeInstance trees.

Every collaborator that needs to search or summarize a layout (analytics,
bulk import, rendering, placement) goes through these functions.
"""
from typing import Callable, Iterator, Optional
import logging

from plot_layout.domain.models import NodeInstance
from plot_layout.utils.geometry import bounds_at, shape_area

logger = logging.getLogger(__name__)


def iter_nodes(root: NodeInstance) -> Iterator[NodeInstance]:
    """Yield every node of the tree in pre-order (parent before children)."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def walk(root: NodeInstance, visitor: Callable[[NodeInstance, int], None]) -> None:
    """
    Call ``visitor(node, depth)`` for each node in pre-order.

    Args:
        root: Tree root
        visitor: Callback receiving the node and its depth (root = 0)
    """
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        visitor(node, depth)
        stack.extend((child, depth + 1) for child in reversed(node.children))


def find_node(root: NodeInstance, node_id: str) -> Optional[NodeInstance]:
    """
    Find a node by id.

    Returns:
        The node, or None when no node carries that id
    """
    for node in iter_nodes(root):
        if node.id == node_id:
            return node
    return None


def index_by_id(root: NodeInstance) -> dict[str, NodeInstance]:
    return {node.id: node for node in iter_nodes(root)}


def sampling_units(root: NodeInstance) -> list[NodeInstance]:
    """All SAMPLING_UNIT nodes in pre-order."""
    return [node for node in iter_nodes(root) if node.is_sampling_unit]


def label_index(root: NodeInstance) -> dict[str, str]:
    """
    Map sampling-unit labels (e.g. "Q1") to instance ids.

    Used by bulk import to resolve external labels. When two units share a
    label the first one in pre-order wins.
    """
    index: dict[str, str] = {}
    for node in sampling_units(root):
        if node.label in index:
            logger.debug(f"Duplicate unit label '{node.label}' at {node.path}; keeping first")
            continue
        index[node.label] = node.id
    return index


def unit_area(root: NodeInstance, node_id: str) -> Optional[float]:
    """
    Area in square meters of the node with the given id.

    Returns:
        Area, or None on a lookup miss or when the shape has no defined area
    """
    node = find_node(root, node_id)
    if node is None:
        return None
    return shape_area(node.shape)


def tree_bounds(root: NodeInstance) -> tuple[float, float, float, float]:
    """Bounding box (min_x, min_y, max_x, max_y) covering every node."""
    min_x = min_y = float("inf")
    max_x = max_y = float("-inf")
    for node in iter_nodes(root):
        node_min_x, node_min_y, node_max_x, node_max_y = bounds_at(node.shape, node.x, node.y)
        min_x = min(min_x, node_min_x)
        min_y = min(min_y, node_min_y)
        max_x = max(max_x, node_max_x)
        max_y = max(max_y, node_max_y)
    return (min_x, min_y, max_x, max_y)
