"""berryfilter public API.

Exposes:
- CustomFilterPlugin, CustomFilter: the custom filter plugin and its wired components
- FilterSchema: hook-driven Strawberry schema builder over SQLAlchemy models
- FilterSpec, normalize_filters, operator_modifier, OPERATOR_REGISTRY: filter configuration helpers
- NamingConvention, DEFAULT_NAMING: naming rules shared by the builder and the plugin
- TypeDescriptor, parse_type_descriptor, TypeRegistry: filter type resolution
- QueryBuilder: the handle modifiers receive
"""
from __future__ import annotations

from .build import Build
from .core.descriptors import TypeDescriptor, parse_type_descriptor
from .core.filters import OPERATOR_REGISTRY, FilterSpec, normalize_filters, operator_modifier, register_operator
from .core.naming import DEFAULT_NAMING, NamingConvention
from .core.types import PRIMITIVE_SCALARS, TypeRegistry
from .dispatch import ModifierDispatcher
from .hooks import FieldContext, SchemaBuilder
from .plugin import CustomFilter, CustomFilterPlugin
from .registry import FilterSchema
from .sql.builders import QueryBuilder

__all__ = [
    'Build',
    'CustomFilter',
    'CustomFilterPlugin',
    'DEFAULT_NAMING',
    'FieldContext',
    'FilterSchema',
    'FilterSpec',
    'ModifierDispatcher',
    'NamingConvention',
    'OPERATOR_REGISTRY',
    'PRIMITIVE_SCALARS',
    'QueryBuilder',
    'SchemaBuilder',
    'TypeDescriptor',
    'TypeRegistry',
    'normalize_filters',
    'operator_modifier',
    'parse_type_descriptor',
    'register_operator',
]
