from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = ['TypeDescriptor', 'parse_type_descriptor', 'is_valid_type_name']

_NAME_RE = re.compile(r'^[_A-Za-z][_0-9A-Za-z]*$')


@dataclass(frozen=True)
class TypeDescriptor:
    """Structural shape of a filter value type such as ``"[Int!]!"``.

    Attributes:
        base_name: The bare type name (``"Int"``).
        is_list: The descriptor was wrapped in ``[...]``.
        is_non_null: A trailing ``!`` was present on the whole descriptor.
        is_non_null_list: A ``!`` was present inside the brackets, i.e. the
            list items are non-null.
    """

    base_name: str
    is_list: bool = False
    is_non_null: bool = False
    is_non_null_list: bool = False

    def __str__(self) -> str:
        out = self.base_name
        if self.is_list:
            if self.is_non_null_list:
                out += '!'
            out = f'[{out}]'
        if self.is_non_null:
            out += '!'
        return out


def is_valid_type_name(name: str) -> bool:
    return bool(name) and _NAME_RE.match(name) is not None


def parse_type_descriptor(descriptor: str) -> TypeDescriptor:
    """Parse a descriptor string into a :class:`TypeDescriptor`.

    Only one level of list/non-null nesting is understood. Anything deeper
    (``"[[Int]]"``) or unbalanced (``"[Int"``) is left in ``base_name`` as-is,
    which is not a valid type name and therefore never resolves.
    """
    rest = (descriptor or '').strip()
    is_non_null = False
    is_list = False
    is_non_null_list = False
    if rest.endswith('!'):
        is_non_null = True
        rest = rest[:-1]
    if len(rest) >= 2 and rest.startswith('[') and rest.endswith(']'):
        is_list = True
        rest = rest[1:-1]
        if rest.endswith('!'):
            is_non_null_list = True
            rest = rest[:-1]
    return TypeDescriptor(
        base_name=rest,
        is_list=is_list,
        is_non_null=is_non_null,
        is_non_null_list=is_non_null_list,
    )
