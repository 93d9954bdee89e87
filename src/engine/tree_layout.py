"""
Tidy tree positioning (Reingold-Tilford, with Buchheim's linear-time
apportioning).

Assigns every HierarchyNode an ``x`` (breadth axis, siblings spread along
it) and ``y`` (depth axis). With a fixed node size the root sits at x=0 and
``y = depth * node_size[1]``.
"""
from typing import Callable, Optional, Tuple

from engine.hierarchy import HierarchyNode

Separation = Callable[[HierarchyNode, HierarchyNode], float]


def default_separation(a: HierarchyNode, b: HierarchyNode) -> float:
    return 1 if a.parent is b.parent else 2


class _WalkNode:
    """Scratch state for one node during the two walks."""

    def __init__(self, node: Optional[HierarchyNode], index: int):
        self.node = node
        self.parent: Optional['_WalkNode'] = None
        self.children = None
        self.default_ancestor = None
        self.ancestor = self
        self.prelim = 0.0
        self.mod = 0.0
        self.change = 0.0
        self.shift = 0.0
        self.thread = None
        self.index = index


def _next_left(v: _WalkNode):
    return v.children[0] if v.children else v.thread


def _next_right(v: _WalkNode):
    return v.children[-1] if v.children else v.thread


def _move_subtree(wm: _WalkNode, wp: _WalkNode, shift: float):
    change = shift / (wp.index - wm.index)
    wp.change -= change
    wp.shift += shift
    wm.change += change
    wp.prelim += shift
    wp.mod += shift


def _execute_shifts(v: _WalkNode):
    shift = 0.0
    change = 0.0
    for w in reversed(v.children):
        w.prelim += shift
        w.mod += shift
        change += w.change
        shift += w.shift + change


def _next_ancestor(vim: _WalkNode, v: _WalkNode, ancestor: _WalkNode) -> _WalkNode:
    return vim.ancestor if vim.ancestor.parent is v.parent else ancestor


def _wrap(root: HierarchyNode) -> _WalkNode:
    wrapped = _WalkNode(root, 0)
    stack = [wrapped]
    while stack:
        current = stack.pop()
        if current.node.children:
            current.children = []
            for i, child in enumerate(current.node.children):
                walk_child = _WalkNode(child, i)
                walk_child.parent = current
                current.children.append(walk_child)
            stack.extend(current.children)
    # Dummy parent so the root has siblings to look at
    wrapped.parent = _WalkNode(None, 0)
    wrapped.parent.children = [wrapped]
    return wrapped


def _post_order(root: _WalkNode):
    order = []
    stack = [root]
    while stack:
        node = stack.pop()
        order.append(node)
        if node.children:
            stack.extend(node.children)
    return reversed(order)


def _pre_order(root: _WalkNode):
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if node.children:
            stack.extend(reversed(node.children))


def tree_layout(root: HierarchyNode, node_size: Tuple[float, float],
                separation: Separation = default_separation) -> HierarchyNode:
    """Position ``root`` and its descendants in place and return ``root``."""
    dx, dy = node_size

    def apportion(v: _WalkNode, w: Optional[_WalkNode], ancestor: _WalkNode) -> _WalkNode:
        if w is None:
            return ancestor
        vip = vop = v
        vim = w
        vom = vip.parent.children[0]
        sip = vip.mod
        sop = vop.mod
        sim = vim.mod
        som = vom.mod
        vim = _next_right(vim)
        vip = _next_left(vip)
        while vim is not None and vip is not None:
            vom = _next_left(vom)
            vop = _next_right(vop)
            vop.ancestor = v
            shift = vim.prelim + sim - vip.prelim - sip + separation(vim.node, vip.node)
            if shift > 0:
                _move_subtree(_next_ancestor(vim, v, ancestor), v, shift)
                sip += shift
                sop += shift
            sim += vim.mod
            sip += vip.mod
            som += vom.mod
            sop += vop.mod
            vim = _next_right(vim)
            vip = _next_left(vip)
        if vim is not None and _next_right(vop) is None:
            vop.thread = vim
            vop.mod += sim - sop
        if vip is not None and _next_left(vom) is None:
            vom.thread = vip
            vom.mod += sip - som
            ancestor = v
        return ancestor

    def first_walk(v: _WalkNode):
        siblings = v.parent.children
        w = siblings[v.index - 1] if v.index else None
        if v.children:
            _execute_shifts(v)
            midpoint = (v.children[0].prelim + v.children[-1].prelim) / 2
            if w is not None:
                v.prelim = w.prelim + separation(v.node, w.node)
                v.mod = v.prelim - midpoint
            else:
                v.prelim = midpoint
        elif w is not None:
            v.prelim = w.prelim + separation(v.node, w.node)
        v.parent.default_ancestor = apportion(v, w, v.parent.default_ancestor or siblings[0])

    def second_walk(v: _WalkNode):
        v.node.x = v.prelim + v.parent.mod
        v.mod += v.parent.mod

    walk_root = _wrap(root)
    for v in _post_order(walk_root):
        first_walk(v)
    walk_root.parent.mod = -walk_root.prelim
    for v in _pre_order(walk_root):
        second_walk(v)

    def size_node(node: HierarchyNode):
        node.x *= dx
        node.y = node.depth * dy
    root.each_before(size_node)
    return root
