"""Test the expression-tree arena, traversal, and visitor."""

from __future__ import annotations

import pytest

from eqtree.ast import BinaryOp, Call, ExpressionTree, Literal, NodeVisitor, Variable
from eqtree.tokens import Function, Operator, Span

_SPAN = Span(0, 0)


def _small_tree() -> ExpressionTree:
    """Build 2 * sin(x) by hand."""
    tree = ExpressionTree("2*sin(x)")
    two = tree.add(Literal(2.0, _SPAN))
    x = tree.add(Variable("x", _SPAN))
    call = tree.add(Call(Function.SIN, (x,), _SPAN))
    tree.root = tree.add(BinaryOp(Operator.MUL, two, call, _SPAN))
    return tree


class TestArena:
    def test_handles_are_sequential(self):
        tree = ExpressionTree()
        assert tree.add(Literal(1.0, _SPAN)) == 0
        assert tree.add(Variable("y", _SPAN)) == 1
        assert len(tree) == 2

    def test_lookup(self):
        tree = _small_tree()
        assert tree.node(1) == Variable("x", _SPAN)
        assert tree[1] is tree.node(1)

    def test_child_must_precede_parent(self):
        tree = ExpressionTree()
        tree.add(Literal(1.0, _SPAN))
        with pytest.raises(ValueError):
            tree.add(BinaryOp(Operator.ADD, 0, 1, _SPAN))

    def test_negative_handle_rejected(self):
        tree = ExpressionTree()
        with pytest.raises(ValueError):
            tree.add(Call(Function.SIN, (-1,), _SPAN))

    def test_children(self):
        tree = _small_tree()
        assert tree.children(tree.root) == (0, 2)
        assert tree.children(2) == (1,)
        assert tree.children(0) == ()

    def test_parsed_tree_children_precede_parents(self, parse_source):
        tree = parse_source("log(a+b, 2)^-|c|")
        for handle in range(len(tree)):
            assert all(child < handle for child in tree.children(handle))
        assert tree.root == len(tree) - 1

    def test_source_kept(self, parse_source):
        assert parse_source("x+1").source == "x+1"


class TestTraversal:
    def test_preorder(self):
        tree = _small_tree()
        assert [h for h, _ in tree.walk()] == [3, 0, 2, 1]

    def test_preorder_subtree(self):
        tree = _small_tree()
        assert [type(n).__name__ for _, n in tree.walk(2)] == ["Call", "Variable"]

    def test_postorder(self):
        tree = _small_tree()
        assert [h for h, _ in tree.postorder()] == [0, 1, 2, 3]

    def test_preorder_of_parsed_tree(self, parse_source):
        tree = parse_source("a-b*c")
        kinds = []
        for _, node in tree.walk():
            if isinstance(node, BinaryOp):
                kinds.append(node.op.symbol)
            elif isinstance(node, Variable):
                kinds.append(node.name)
        assert kinds == ["-", "a", "*", "b", "c"]

    def test_walk_without_root(self):
        with pytest.raises(ValueError):
            list(ExpressionTree().walk())

    def test_subtree_root_defaults_to_root(self):
        tree = _small_tree()
        assert tree.subtree_root() == tree.root
        assert tree.subtree_root(1) == 1

    def test_visit_without_root(self):
        with pytest.raises(ValueError, match="no root"):
            _VariableCollector().visit(ExpressionTree())


class TestStructure:
    def test_small_tree(self):
        assert _small_tree().structure() == ("*", 2.0, ("sin", "x"))

    def test_ignores_spans(self, parse_source):
        assert parse_source("2*x").structure() == parse_source("2 *  x").structure()


class _VariableCollector(NodeVisitor):
    def __init__(self) -> None:
        self.names: list[str] = []

    def visit_Variable(self, tree, handle, node):
        self.names.append(node.name)


class _Depth(NodeVisitor):
    def visit_Literal(self, tree, handle, node):
        return 1

    def visit_Variable(self, tree, handle, node):
        return 1

    def visit_BinaryOp(self, tree, handle, node):
        return 1 + max(self.visit(tree, node.left), self.visit(tree, node.right))

    def visit_Call(self, tree, handle, node):
        return 1 + max(self.visit(tree, arg) for arg in node.args)


class TestVisitor:
    def test_generic_visit_reaches_all_variables(self, parse_source):
        collector = _VariableCollector()
        collector.visit(parse_source("x*sin(y)+root(z, w)"))
        assert collector.names == ["x", "y", "z", "w"]

    def test_returning_visitor(self, parse_source):
        assert _Depth().visit(parse_source("1+2*3")) == 3
        assert _Depth().visit(parse_source("sqrt(x)")) == 2
