"""
Base data structures intended for inheritance.

All the data objects in the :py:mod:`ase_tools.ase` subpackage inherit from
:py:class:`~ase_tools.ase.base.BaseElement` and implement its ``read``
classmethod. Fields are declared with attrs_.

.. _attrs: https://www.attrs.org/en/stable/index.html
"""

import io
import logging
from enum import Enum
from typing import Any, BinaryIO, Callable, Generator, Optional, TypeVar

from attrs import fields, has, validate

from ase_tools.ase.bin_utils import trimmed_repr

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseElement")


class BaseElement:
    """
    Base element of the Aseprite file structs.

    .. py:classmethod:: read(cls, fp)

        Read the element from a file-like object.

    .. py:method:: write(self, fp)

        Write the element to a file-like object.

    .. py:classmethod:: frombytes(self, data, *args, **kwargs)

        Read the element from bytes.

    .. py:method:: tobytes(self, *args, **kwargs)

        Write the element to bytes.

    .. py:method:: validate(self)

        Validate the attribute.
    """

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        raise NotImplementedError()

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        raise NotImplementedError()

    @classmethod
    def frombytes(cls: type[T], data: bytes, *args: Any, **kwargs: Any) -> T:
        with io.BytesIO(data) as f:
            return cls.read(f, *args, **kwargs)

    def tobytes(self, *args: Any, **kwargs: Any) -> bytes:
        with io.BytesIO() as f:
            self.write(f, *args, **kwargs)
            return f.getvalue()

    def validate(self) -> None:
        return validate(self)  # type: ignore[arg-type]

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("{name}(...)".format(name=self.__class__.__name__))
            return

        with p.group(2, "{name}(".format(name=self.__class__.__name__), ")"):
            p.breakable("")
            field_list = [f for f in fields(self.__class__) if f.repr]  # type: ignore[arg-type]
            for idx, field_item in enumerate(field_list):
                if idx:
                    p.text(",")
                    p.breakable()
                p.text("{field}=".format(field=field_item.name))
                value = getattr(self, field_item.name)
                if isinstance(value, bytes):
                    p.text(trimmed_repr(value))
                elif isinstance(value, Enum):
                    p.text(value.name or repr(value))
                else:
                    p.pretty(value)
            p.breakable("")

    def _find(
        self, condition: Optional[Callable[[Any], bool]] = None
    ) -> Generator[Any, None, None]:
        """
        Traversal API intended for debugging.
        """
        for _ in BaseElement._traverse(self, condition):
            yield _

    @staticmethod
    def _traverse(
        element: Any, condition: Optional[Callable[[Any], bool]] = None
    ) -> Generator[Any, None, None]:
        if condition is None or condition(element):
            yield element
        if isinstance(element, (list, tuple)):
            for child in element:
                for _ in BaseElement._traverse(child, condition):
                    yield _
        elif has(element.__class__):
            for field_item in fields(element.__class__):
                child = getattr(element, field_item.name)
                for _ in BaseElement._traverse(child, condition):
                    yield _
