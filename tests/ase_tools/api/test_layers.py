import logging

import pytest

from ase_tools.api.layers import LayerTree
from ase_tools.ase.chunks import LayerChunk
from ase_tools.constants import LayerFlags, LayerType
from ase_tools.exceptions import LayerIndexError

logger = logging.getLogger(__name__)


def make_layer(name: str, child_level: int = 0, visible: bool = True,
               group: bool = False) -> LayerChunk:
    flags = LayerFlags.EDITABLE | (LayerFlags.VISIBLE if visible else 0)
    layer_type = LayerType.GROUP if group else LayerType.NORMAL
    return LayerChunk(flags, layer_type, child_level, name=name)


@pytest.fixture
def layers() -> list:
    # group
    #   body
    #   sub
    #     eye
    # top
    return [
        make_layer("group", 0, group=True),
        make_layer("body", 1),
        make_layer("sub", 1, group=True),
        make_layer("eye", 2),
        make_layer("top", 0),
    ]


def test_tree_sequence(layers: list) -> None:
    tree = LayerTree(layers)
    assert len(tree) == 5
    assert list(tree) == layers
    assert tree[3] is layers[3]
    with pytest.raises(LayerIndexError):
        tree[5]
    with pytest.raises(LayerIndexError):
        tree[-1]


def test_parent_of(layers: list) -> None:
    tree = LayerTree(layers)
    assert tree.parent_of(layers[0]) is None
    assert tree.parent_of(layers[1]) is layers[0]
    assert tree.parent_of(layers[2]) is layers[0]
    assert tree.parent_of(layers[3]) is layers[2]
    assert tree.parent_of(4) is None


def test_parent_of_legacy_scan(layers: list) -> None:
    tree = LayerTree(layers, scan_first=False)
    assert tree.parent_of(layers[1]) is None
    assert tree.parent_of(layers[2]) is None
    assert tree.parent_of(layers[3]) is layers[2]


def test_parent_level_is_lower(layers: list) -> None:
    for scan_first in (True, False):
        tree = LayerTree(layers, scan_first=scan_first)
        for layer in tree:
            parent = tree.parent_of(layer)
            if parent is not None:
                assert parent.child_level < layer.child_level


def test_index_of_uses_identity() -> None:
    first, second = make_layer("same"), make_layer("same")
    assert first == second
    tree = LayerTree([first, second])
    assert tree.index_of(second) == 1
    with pytest.raises(ValueError):
        tree.index_of(make_layer("other"))
    with pytest.raises(LayerIndexError):
        tree.index_of(2)


def test_children_of(layers: list) -> None:
    tree = LayerTree(layers)
    assert tree.children_of(layers[0]) == [layers[1], layers[2]]
    assert tree.children_of(layers[2]) == [layers[3]]
    assert tree.children_of(layers[4]) == []
    assert tree.children_of() == [layers[0], layers[4]]


def test_is_visible(layers: list) -> None:
    tree = LayerTree(layers)
    assert all(tree.is_visible(layer) for layer in layers)


def test_is_visible_inherits_hidden_ancestor() -> None:
    layers = [
        make_layer("group", 0, visible=False, group=True),
        make_layer("sub", 1, group=True),
        make_layer("eye", 2),
        make_layer("top", 0),
    ]
    tree = LayerTree(layers)
    assert not tree.is_visible(layers[1])
    assert not tree.is_visible(layers[2])
    assert tree.is_visible(layers[3])


def test_is_visible_own_flag() -> None:
    layers = [make_layer("group", 0, group=True), make_layer("body", 1, visible=False)]
    tree = LayerTree(layers)
    assert tree.is_visible(0)
    assert not tree.is_visible(1)
