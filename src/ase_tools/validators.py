"""
Validation functions for attrs.
"""
from typing import Any

from attrs import define
from attrs.validators import in_

__all__ = ["in_", "range_"]


@define(repr=False, frozen=True)
class _RangeValidator:
    minimum: int
    maximum: int

    def __call__(self, inst: Any, attr: Any, value: Any) -> None:
        try:
            in_range = self.minimum <= value <= self.maximum
        except TypeError:
            in_range = False

        if not in_range:
            raise ValueError(
                "'{name}' must be in range [{minimum}, {maximum}]: {value!r}".format(
                    name=attr.name,
                    minimum=self.minimum,
                    maximum=self.maximum,
                    value=value,
                )
            )

    def __repr__(self) -> str:
        return "<range_ validator with [{minimum!r}, {maximum!r}]>".format(
            minimum=self.minimum, maximum=self.maximum
        )


def range_(minimum: int, maximum: int) -> _RangeValidator:
    """
    A validator that raises a :exc:`ValueError` if the initializer is called
    with a value that does not belong in the [minimum, maximum] range. The
    check is performed using ``minimum <= value and value <= maximum``
    """
    return _RangeValidator(minimum, maximum)
