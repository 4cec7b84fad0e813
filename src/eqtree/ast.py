"""Expression tree: arena-allocated nodes addressed by integer handles."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from eqtree.tokens import Function, Operator, Span


@dataclass(frozen=True, slots=True)
class Literal:
    """Numeric literal, stored as the caller's numeric type."""

    value: Any
    span: Span


@dataclass(frozen=True, slots=True)
class Variable:
    """Named value, e.g. x."""

    name: str
    span: Span


@dataclass(frozen=True, slots=True)
class BinaryOp:
    """Binary operation; left and right are handles into the tree."""

    op: Operator
    left: int
    right: int
    span: Span


@dataclass(frozen=True, slots=True)
class Call:
    """Function call with one handle per argument."""

    function: Function
    args: tuple[int, ...]
    span: Span


Node = Literal | Variable | BinaryOp | Call


class ExpressionTree:
    """Append-only arena holding the nodes of one parsed equation.

    Children are always added before their parent, so a handle is only ever
    referenced by nodes with larger handles and the tree cannot contain cycles.
    """

    def __init__(self, source: str = "") -> None:
        self.source = source
        self.root: int | None = None
        self._nodes: list[Node] = []

    def add(self, node: Node) -> int:
        """Append a node and return its handle."""
        handle = len(self._nodes)
        for child in _child_handles(node):
            if not 0 <= child < handle:
                raise ValueError(f"child handle {child} does not precede node {handle}")
        self._nodes.append(node)
        return handle

    def node(self, handle: int) -> Node:
        return self._nodes[handle]

    def __getitem__(self, handle: int) -> Node:
        return self._nodes[handle]

    def __len__(self) -> int:
        return len(self._nodes)

    def children(self, handle: int) -> tuple[int, ...]:
        return _child_handles(self._nodes[handle])

    def subtree_root(self, handle: int | None = None) -> int:
        """Return *handle*, or the tree root when *handle* is None."""
        if handle is not None:
            return handle
        if self.root is None:
            raise ValueError("tree has no root")
        return self.root

    def walk(self, handle: int | None = None) -> Iterator[tuple[int, Node]]:
        """Yield (handle, node) pairs in pre-order, children left to right."""
        stack = [self.subtree_root(handle)]
        while stack:
            current = stack.pop()
            node = self._nodes[current]
            yield current, node
            stack.extend(reversed(_child_handles(node)))

    def postorder(self, handle: int | None = None) -> Iterator[tuple[int, Node]]:
        """Yield (handle, node) pairs with every child before its parent."""
        stack: list[tuple[int, bool]] = [(self.subtree_root(handle), False)]
        while stack:
            current, expanded = stack.pop()
            node = self._nodes[current]
            if expanded:
                yield current, node
                continue
            stack.append((current, True))
            for child in reversed(_child_handles(node)):
                stack.append((child, False))

    def structure(self, handle: int | None = None) -> Any:
        """Return the shape of a subtree as nested tuples, ignoring spans.

        Literals become their value, variables their name, operations
        ``(symbol, left, right)`` and calls ``(label, *args)``. Two trees
        are structurally equal when their structures compare equal.
        """
        node = self._nodes[self.subtree_root(handle)]
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Variable):
            return node.name
        if isinstance(node, BinaryOp):
            return (node.op.symbol, self.structure(node.left), self.structure(node.right))
        return (node.function.label, *(self.structure(arg) for arg in node.args))


class NodeVisitor:
    """Walk an ExpressionTree, dispatching on node class name.

    Subclasses define ``visit_Literal``, ``visit_Variable``, ``visit_BinaryOp``
    and ``visit_Call``; each receives the tree, the handle and the node. The
    default ``generic_visit`` visits the children and returns None.
    """

    def visit(self, tree: ExpressionTree, handle: int | None = None) -> Any:
        if handle is None:
            handle = tree.subtree_root()
        node = tree[handle]
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(tree, handle, node)

    def generic_visit(self, tree: ExpressionTree, handle: int, node: Node) -> Any:
        for child in tree.children(handle):
            self.visit(tree, child)
        return None


def _child_handles(node: Node) -> tuple[int, ...]:
    if isinstance(node, BinaryOp):
        return (node.left, node.right)
    if isinstance(node, Call):
        return node.args
    return ()
