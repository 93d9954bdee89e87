"""
Reconstruction of elimination match trees.

Raw data only links a match forward to the match its winner advances to
(``next_match_id``). The builder inverts those pointers into a rooted tree:
a synthetic root whose children are the final-round matches, and below
every match the matches that feed into it.
"""
import logging
from typing import Callable, Dict, List, Optional

from engine.errors import MalformedBracketError
from engine.models import Match

logger = logging.getLogger(__name__)


class HierarchyNode:
    """A node of a match tree. The root carries no match."""

    def __init__(self, match: Optional[Match], parent: 'HierarchyNode' = None):
        self.match = match
        self.parent = parent
        self.children: List['HierarchyNode'] = []
        self.depth = 0 if parent is None else parent.depth + 1
        self.height = 0
        # Filled in by tree_layout()
        self.x = 0.0
        self.y = 0.0

    @property
    def is_root(self) -> bool:
        return self.match is None

    def each_before(self, callback: Callable[['HierarchyNode'], None]):
        """Visit nodes in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            callback(node)
            stack.extend(reversed(node.children))

    def each_after(self, callback: Callable[['HierarchyNode'], None]):
        """Visit nodes in post-order."""
        order = []
        stack = [self]
        while stack:
            node = stack.pop()
            order.append(node)
            stack.extend(node.children)
        for node in reversed(order):
            callback(node)

    def descendants(self) -> List['HierarchyNode']:
        """All nodes of the subtree in breadth-first order, self included."""
        nodes = []
        queue = [self]
        while queue:
            node = queue.pop(0)
            nodes.append(node)
            queue.extend(node.children)
        return nodes

    def match_nodes(self) -> List['HierarchyNode']:
        return [node for node in self.descendants() if not node.is_root]

    def links(self) -> List[tuple]:
        """(parent, child) pairs between match nodes, excluding the root."""
        return [(node.parent, node) for node in self.descendants()
                if node.parent is not None and not node.parent.is_root]

    def sort_children(self, key: Callable[['HierarchyNode'], object]):
        """Stable-sort the children of every node in the subtree."""
        def _sort(node):
            node.children.sort(key=key)
        self.each_before(_sort)

    def __repr__(self):
        if self.is_root:
            return f"HierarchyNode(root, children={len(self.children)})"
        return f"HierarchyNode(match={self.match.id}, depth={self.depth}, height={self.height})"


def filter_matches_by_type(matches: List[Match], match_type: str) -> List[Match]:
    """Matches belonging to one side of a double elimination bracket."""
    return [match for match in matches if match.type == match_type]


def get_final_round_number(matches: List[Match]) -> int:
    """Highest round number among the matches. Missing round numbers count as 0."""
    if not matches:
        raise MalformedBracketError("Cannot find the final round of an empty match list")
    missing = [match.id for match in matches if match.round_number is None]
    if missing:
        logger.warning(
            "%d match(es) have no round number and are treated as round 0: %s",
            len(missing), ', '.join(str(m) for m in missing[:10]))
    return max(match.round_number if match.round_number is not None else 0 for match in matches)


def build_match_hierarchy(matches: List[Match]) -> HierarchyNode:
    """
    Build a rooted match tree for one bracket side.

    The root is synthetic; its children are all matches in the final round.
    Every other node's children are the matches whose ``next_match_id``
    points at it.

    Raises MalformedBracketError for an empty match list or when the
    next-match pointers reachable from the final round contain a cycle.
    """
    final_round_number = get_final_round_number(matches)

    # Pass 1: index matches by the match they feed into
    children_by_parent: Dict[object, List[Match]] = {}
    for match in matches:
        if match.next_match_id is not None:
            children_by_parent.setdefault(match.next_match_id, []).append(match)

    # Pass 2: expand from the root
    root = HierarchyNode(None)
    finals = [match for match in matches
              if (match.round_number if match.round_number is not None else 0) == final_round_number]
    seen = set()
    stack = [(root, finals)]
    while stack:
        parent, child_matches = stack.pop()
        for match in child_matches:
            if match.id in seen:
                raise MalformedBracketError(
                    f"Match {match.id} is reachable more than once from the final round; "
                    f"next-match pointers must form a tree")
            seen.add(match.id)
            node = HierarchyNode(match, parent)
            parent.children.append(node)
            stack.append((node, children_by_parent.get(match.id, [])))

    unreachable = [match.id for match in matches if match.id not in seen]
    if unreachable:
        logger.warning(
            "%d match(es) do not lead to the final round and were left out: %s",
            len(unreachable), ', '.join(str(m) for m in unreachable[:10]))

    _compute_heights(root)
    return root


def _compute_heights(root: HierarchyNode):
    def _height(node):
        node.height = 0 if not node.children else max(child.height for child in node.children) + 1
    root.each_after(_height)
