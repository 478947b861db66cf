import random

from gp_operator_plugins.trees import (
    Expression,
    Node,
    binary,
    constant,
    copy_node,
    count_nodes,
    get_child,
    sample_node,
    set_child,
    set_node,
    unwrap,
    variable,
)


def test_sample_node_returns_node_from_tree(tree: Node) -> None:
    rng = random.Random(0)  # noqa: S311 - deterministic unit tests
    nodes = list(tree.walk())
    for _ in range(20):
        picked = sample_node(tree, rng)
        assert any(picked is node for node in nodes)


def test_set_node_rewrites_in_place(tree: Node) -> None:
    target = get_child(tree, 1)
    set_node(target, constant(3.0))
    assert tree.children[1] is target
    assert target.is_constant and target.val == 3.0
    assert count_nodes(tree) == 3


def test_set_child_and_copy_are_independent(tree: Node) -> None:
    clone = copy_node(tree)
    set_child(clone, 0, variable(5))
    assert clone != tree
    assert get_child(tree, 0).feature == 0


def test_expression_with_contents_keeps_metadata() -> None:
    ex = Expression(tree=variable(0), metadata={"units": "m"})
    rebuilt = ex.with_contents(binary("+", variable(0), constant(1.0)))
    assert isinstance(rebuilt, Expression)
    assert rebuilt.metadata == {"units": "m"}
    assert unwrap(rebuilt) is rebuilt.tree
    assert str(rebuilt.tree) == "(x0 + 1.0)"
