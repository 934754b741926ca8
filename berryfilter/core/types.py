from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

from .descriptors import TypeDescriptor, is_valid_type_name, parse_type_descriptor

_logger = logging.getLogger("berryfilter")

__all__ = ['PRIMITIVE_SCALARS', 'TypeRegistry']

# GraphQL primitive name -> Strawberry scalar annotation; built once.
PRIMITIVE_SCALARS: Mapping[str, Any] = MappingProxyType({
    'Boolean': bool,
    'String': str,
    'Int': int,
    'Float': float,
})


class TypeRegistry:
    """Resolves filter type descriptors against the build's named-type table.

    The registry holds no types of its own: every lookup and every primitive
    registration goes through ``build`` (``get_type_by_name`` / ``ensure_type``),
    so a primitive is registered at most once per build no matter how many
    filters reference it.
    """

    def __init__(self, build: Any):
        self.build = build

    def resolve(self, base_name: str) -> Optional[Any]:
        if not is_valid_type_name(base_name):
            return None
        existing = self.build.get_type_by_name(base_name)
        if existing is not None:
            return existing
        scalar = PRIMITIVE_SCALARS.get(base_name)
        if scalar is None:
            return None
        return self.build.ensure_type(base_name, lambda: scalar, kind='scalar')

    def is_input_type(self, base_name: str) -> bool:
        return self.build.is_input_type(base_name)

    @staticmethod
    def wrap(type_: Any, descriptor: TypeDescriptor) -> Any:
        """Apply list/non-null wrapping as written in the descriptor.

        Strawberry types are non-null unless wrapped in ``Optional``:
        ``"[String!]"`` -> ``Optional[List[str]]``, ``"[String]!"`` ->
        ``List[Optional[str]]``.
        """
        if not descriptor.is_list:
            return type_ if descriptor.is_non_null else Optional[type_]
        item = type_ if descriptor.is_non_null_list else Optional[type_]
        listed = List[item]  # type: ignore[valid-type]
        return listed if descriptor.is_non_null else Optional[listed]

    def ensure(self, type_descriptor: str) -> Optional[Any]:
        """parse -> resolve -> wrap; None when the base type is unresolvable."""
        descriptor = parse_type_descriptor(type_descriptor)
        base = self.resolve(descriptor.base_name)
        if base is None:
            _logger.debug("berryfilter: unresolvable filter type %r", type_descriptor)
            return None
        return self.wrap(base, descriptor)
