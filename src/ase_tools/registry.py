"""
Registry pattern utility for creating type registries.

Usage example::

    from ase_tools.registry import new_registry

    TYPES, register = new_registry(attribute='chunk_type')

    @register(0x2004)
    class LayerChunk:
        pass

    kls = TYPES[0x2004]
"""

from typing import Any, Callable, Tuple, TypeVar, Union

T = TypeVar("T")


def new_registry(attribute: Union[str, None] = None) -> Tuple[dict, Callable]:
    """
    Returns an empty dict and a @register decorator.

    :param attribute: Optional attribute name to set on registered objects.
                     The key will be stored as this attribute on the object.
    :return: Tuple of (registry_dict, register_decorator)
    """
    registry = {}

    def register(key: Any) -> Callable[[Callable[..., T]], Callable[..., T]]:
        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            registry[key] = func
            if attribute:
                setattr(func, attribute, key)
            return func

        return decorator

    return registry, register
