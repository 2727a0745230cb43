"""
Layer tree module.

Aseprite stores layers as one flat list in depth-first pre-order. There are no
parent references; each layer carries a ``child_level`` depth marker and its
parent is the nearest preceding layer one level up. :py:class:`LayerTree`
wraps that flat list and answers the structural questions the compositor
needs without building a pointer-based tree.

Example usage::

    from ase_tools.api.layers import LayerTree

    tree = LayerTree(document.layers)
    for layer in tree:
        parent = tree.parent_of(layer)
        print(layer.name, parent.name if parent else None, tree.is_visible(layer))
"""

import logging
from typing import Iterator, Optional, Sequence, Union

from ase_tools.ase.chunks import LayerChunk
from ase_tools.exceptions import LayerIndexError

logger = logging.getLogger(__name__)

LayerRef = Union[LayerChunk, int]


class LayerTree(object):
    """
    Parent and visibility resolution over the flattened layer list.

    :param layers: layer chunks in document order; positions are the layer
        indices cels refer to.
    :param scan_first: include the first layer when scanning backward for a
        parent. ``False`` reproduces the legacy scan that never considers
        index 0 as a parent.
    """

    def __init__(self, layers: Sequence[LayerChunk], scan_first: bool = True):
        self._layers = list(layers)
        self._scan_first = scan_first

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[LayerChunk]:
        return iter(self._layers)

    def __getitem__(self, index: int) -> LayerChunk:
        if not 0 <= index < len(self._layers):
            raise LayerIndexError(
                "Layer index %d out of range [0, %d)" % (index, len(self._layers))
            )
        return self._layers[index]

    def __repr__(self) -> str:
        return "%s(size=%d)" % (self.__class__.__name__, len(self))

    @property
    def scan_first(self) -> bool:
        return self._scan_first

    def index_of(self, layer: LayerRef) -> int:
        """
        Position of the layer in the flattened list.

        Layers are looked up by identity, since two layer chunks can hold
        equal values. Integers are validated and returned as is.

        :raise LayerIndexError: for an out of range integer.
        :raise ValueError: when the layer is not part of this tree.
        """
        if isinstance(layer, int):
            self[layer]
            return layer
        for index, item in enumerate(self._layers):
            if item is layer:
                return index
        raise ValueError("%r is not in the layer tree" % (layer,))

    def parent_of(self, layer: LayerRef) -> Optional[LayerChunk]:
        """
        Nearest preceding layer whose child level is one less than the
        layer's own, or None for top level layers.
        """
        index = self.index_of(layer)
        level = self._layers[index].child_level
        if level == 0:
            return None
        stop = -1 if self._scan_first else 0
        for position in range(index - 1, stop, -1):
            candidate = self._layers[position]
            if candidate.child_level == level - 1:
                return candidate
        logger.debug("No parent found for layer %d" % index)
        return None

    def children_of(self, layer: Optional[LayerRef] = None) -> list[LayerChunk]:
        """
        Direct children of a layer, or the top level layers for None.
        """
        if layer is None:
            return [item for item in self._layers if item.child_level == 0]
        index = self.index_of(layer)
        level = self._layers[index].child_level
        children = []
        for item in self._layers[index + 1 :]:
            if item.child_level <= level:
                break
            if item.child_level == level + 1:
                children.append(item)
        return children

    def is_visible(self, layer: LayerRef) -> bool:
        """
        Layer visibility. Takes group visibility in account.

        :return: `bool`
        """
        current: Optional[LayerChunk] = self[self.index_of(layer)]
        while current is not None:
            if not current.visible:
                return False
            current = self.parent_of(current)
        return True
