"""
Depth-first node lookup by name.

Traversal is pre-order: a node is tested before its children, and earlier
siblings (with their whole subtrees) before later ones. A matching node's
own subtree is still searched, so nested namesakes are all reported by
find_all. Search never mutates the tree.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from .nodes import FbxNode, NodeContainer


@dataclass(frozen=True, eq=False)
class NodeLink:
    """A found node paired with its direct parent (document or node)."""
    parent: NodeContainer
    node: FbxNode


def iter_links(root: NodeContainer) -> Iterator[NodeLink]:
    """Yield a link for every descendant of root in pre-order."""
    for node in root.children:
        yield NodeLink(root, node)
        yield from iter_links(node)


def find_all(root: NodeContainer, name: str) -> list[NodeLink]:
    """Return links to all descendants of root whose name equals name."""
    return [link for link in iter_links(root) if link.node.name == name]


def find_first(root: NodeContainer, name: str) -> Optional[NodeLink]:
    """Return the first descendant named name in document order, or None."""
    return next((link for link in iter_links(root) if link.node.name == name), None)
