from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple

import inflection

__all__ = [
    'NamingConvention',
    'DEFAULT_NAMING',
    'IRREGULAR_PLURALS',
    'from_camel',
    'to_camel',
    'python_attr_name',
]

_camel_to_snake_pattern = re.compile(r'(?<!^)(?=[A-Z])')
_camel_tail_pattern = re.compile(r'^(.+?)([A-Z][a-z]+)$')

# Checked before the inflector, which gets these wrong (singular -> plural)
IRREGULAR_PLURALS: Dict[str, str] = {
    'cookie': 'cookies',
    'campus': 'campuses',
    'leaf': 'leaves',
}

_PYTHON_KEYWORDS = frozenset((
    'False', 'None', 'True', 'and', 'as', 'assert', 'async', 'await', 'break', 'class', 'continue',
    'def', 'del', 'elif', 'else', 'except', 'finally', 'for', 'from', 'global', 'if', 'import',
    'in', 'is', 'lambda', 'nonlocal', 'not', 'or', 'pass', 'raise', 'return', 'try', 'while',
    'with', 'yield',
))


def from_camel(name: str) -> str:
    """Convert lower/upper camelCase to snake_case."""
    if not name:
        return name
    return _camel_to_snake_pattern.sub('_', str(name)).lower()


def to_camel(name: str) -> str:
    """Convert snake_case to lowerCamelCase."""
    if not name:
        return name
    parts = str(name).split('_')
    return parts[0] + ''.join(p.capitalize() for p in parts[1:])


def python_attr_name(graphql_name: str) -> str:
    """Python attribute used to carry a GraphQL field/argument name.

    Keywords get a trailing underscore (``in`` -> ``in_``), the same trick the
    comparison inputs use.
    """
    if graphql_name in _PYTHON_KEYWORDS:
        return graphql_name + '_'
    return graphql_name


def _match_case(template: str, word: str) -> str:
    if template[:1].isupper():
        return word[:1].upper() + word[1:]
    return word


@dataclass(frozen=True)
class NamingConvention:
    """Bidirectional naming rules shared by the schema builder and the filter plugin.

    Entity names are singular PascalCase (``User``). Derived names:

    - filter input type: ``<Entity><filter_type_suffix>`` (``UserCustomFilter``)
    - connection type: ``<plural Entity><connection_suffix>`` (``UsersConnection``)
    - root connection field: ``all<plural Entity>`` (``allUsers``)
    - root list field: ``<plural entity>List`` (``usersList``)

    Words go through :mod:`inflection`; ``irregular`` and ``uncountable``
    are checked first. The inverse (type name -> entity) matches the known
    entity names against the forward rule, then falls back to stripping
    ``connection_suffix`` and singularizing; list-wrapped object types
    already carry the entity name.
    """

    filter_type_suffix: str = 'CustomFilter'
    connection_suffix: str = 'Connection'
    list_field_suffix: str = 'List'
    all_rows_prefix: str = 'all'
    irregular: Mapping[str, str] = field(default_factory=lambda: dict(IRREGULAR_PLURALS))
    uncountable: Tuple[str, ...] = ()

    # --- inflection ------------------------------------------------------
    def pluralize(self, word: str) -> str:
        if not word:
            return word
        m = _camel_tail_pattern.match(word)
        if m:
            prefix, tail = m.groups()
            return prefix + self.pluralize(tail)
        lower = word.lower()
        if lower in self.uncountable:
            return word
        if lower in self.irregular:
            return _match_case(word, self.irregular[lower])
        return inflection.pluralize(word)

    def singularize(self, word: str) -> str:
        if not word:
            return word
        m = _camel_tail_pattern.match(word)
        if m:
            prefix, tail = m.groups()
            return prefix + self.singularize(tail)
        lower = word.lower()
        if lower in self.uncountable:
            return word
        for singular, plural in self.irregular.items():
            if lower == plural:
                return _match_case(word, singular)
            if lower == singular:
                return word
        return inflection.singularize(word)

    # --- entity -> type/field names --------------------------------------
    def filter_type_name(self, entity_name: str) -> str:
        return f"{entity_name}{self.filter_type_suffix}"

    def connection_type_name(self, entity_name: str) -> str:
        return f"{self.pluralize(entity_name)}{self.connection_suffix}"

    def all_rows_field_name(self, entity_name: str) -> str:
        return f"{self.all_rows_prefix}{self.pluralize(entity_name)}"

    def list_field_name(self, entity_name: str) -> str:
        plural = self.pluralize(entity_name)
        return f"{plural[:1].lower()}{plural[1:]}{self.list_field_suffix}"

    # --- type names -> entity ---------------------------------------------
    def entity_from_filter_type(self, type_name: str) -> Optional[str]:
        suffix = self.filter_type_suffix
        if not type_name or not type_name.endswith(suffix) or len(type_name) == len(suffix):
            return None
        return type_name[: -len(suffix)]

    def entity_from_type_name(self, type_name: str, entity_names: Optional[Iterable[str]] = None) -> Optional[str]:
        """Return the entity name a (bare) return type name stands for.

        With ``entity_names`` the lookup is exact: the entity whose forward
        name equals ``type_name`` wins, and singularizing is only the
        fallback for names outside that set.
        """
        if not type_name:
            return None
        for entity_name in entity_names or ():
            if type_name in (entity_name, self.connection_type_name(entity_name)):
                return entity_name
        suffix = self.connection_suffix
        if type_name.endswith(suffix):
            stem = type_name[: -len(suffix)]
            return self.singularize(stem) if stem else None
        return type_name


DEFAULT_NAMING = NamingConvention()
