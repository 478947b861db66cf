import random
from pathlib import Path

import pytest

from gp_operator_plugins.dsl import SearchOptions
from gp_operator_plugins.loader import (
    OperatorLoadError,
    compile_operator,
    read_operator_source,
    validate_operator,
)
from gp_operator_plugins.trees import Node, count_nodes

GROW_SOURCE = """
def grow_leaf(tree, options, nfeatures, rng):
    node = sample_node(tree, rng)
    set_node(node, binary("*", copy_node(node), variable(rng.randrange(nfeatures))))
    return tree
"""


def test_compiled_operator_sees_tree_primitives(tree: Node, options: SearchOptions) -> None:
    fn = compile_operator("mutation", "grow_leaf", GROW_SOURCE)
    before = count_nodes(tree)
    rng = random.Random(0)  # noqa: S311 - deterministic unit tests
    out = fn(tree, options, 2, rng)
    assert count_nodes(out) == before + 2


def test_each_load_gets_a_fresh_namespace() -> None:
    first = compile_operator("mutation", "first", "K = 1\ndef first(t, o, n, r):\n    return K\n")
    second = compile_operator("mutation", "later", "K = 2\ndef later(t, o, n, r):\n    return K\n")
    assert first(None, None, 0, None) == 1
    assert second(None, None, 0, None) == 2


def test_syntax_error_is_chained() -> None:
    with pytest.raises(OperatorLoadError) as info:
        compile_operator("mutation", "broken", "def broken(tree, options, nfeatures, rng)\n")
    assert isinstance(info.value.__cause__, SyntaxError)


def test_runtime_error_in_module_body_is_chained() -> None:
    with pytest.raises(OperatorLoadError) as info:
        compile_operator("mutation", "boom", "raise RuntimeError('nope')\n")
    assert isinstance(info.value.__cause__, RuntimeError)


def test_missing_definition_is_rejected() -> None:
    with pytest.raises(OperatorLoadError, match="did not define 'wanted'"):
        compile_operator("mutation", "wanted", "def other(t, o, n, r):\n    return t\n")


def test_non_callable_binding_is_rejected() -> None:
    with pytest.raises(OperatorLoadError, match="not callable"):
        compile_operator("selection", "pick", "pick = 3\n")


def test_wrong_arity_is_rejected() -> None:
    with pytest.raises(OperatorLoadError, match="must accept"):
        compile_operator("mutation", "short", "def short(tree, options):\n    return tree\n")


def test_survival_requires_exclude_keyword() -> None:
    with pytest.raises(OperatorLoadError):
        validate_operator("survival", "no_kw", lambda population, options: 0)
    fn = validate_operator("survival", "kw", lambda population, options, exclude_indices=(): 0)
    assert fn(None, None) == 0


def test_invalid_identifier_is_rejected() -> None:
    with pytest.raises(OperatorLoadError, match="not a valid identifier"):
        compile_operator("mutation", "not-a-name", GROW_SOURCE)


def test_read_operator_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Mutation file not found"):
        read_operator_source("mutation", tmp_path / "missing.py")
    with pytest.raises(FileNotFoundError):
        read_operator_source("mutation", tmp_path)
