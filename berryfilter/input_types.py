"""
Synthesized ``<Entity>CustomFilter`` input types.

Each filterable entity gets one Strawberry input type. It is registered in
the build's type table during the ``init`` stage with a single placeholder
field (``_``) and receives its real fields once, when the schema builder
finalizes pending input types (``input:fields`` stage).
"""

from __future__ import annotations

import logging
import weakref
from typing import Any, Dict, List, Optional, Tuple

from .core.descriptors import is_valid_type_name, parse_type_descriptor
from .core.filters import FilterSpec
from .core.types import TypeRegistry

_logger = logging.getLogger("berryfilter")

__all__ = ['FilterTypeBuilder', 'PLACEHOLDER_FIELD', 'filter_type_description']

PLACEHOLDER_FIELD = '_'
_PLACEHOLDER_DESCRIPTION = 'Placeholder; custom filter fields are attached when the schema is built.'


def filter_type_description(entity_name: str) -> str:
    return (
        f"A customized filter to be used against `{entity_name}` object types. "
        "All fields are combined with a logical 'and.'"
    )


class FilterTypeBuilder:
    """Creates and populates the custom filter input type of every configured entity."""

    def __init__(self, filters: Dict[str, Dict[str, FilterSpec]]):
        self.filters = filters
        # build -> entity -> [(spec, annotation)]
        self._resolved: "weakref.WeakKeyDictionary[Any, Dict[str, List[Tuple[FilterSpec, Any]]]]" = (
            weakref.WeakKeyDictionary()
        )

    # ---------- type-creation stage ----------
    def create_type(self, build: Any, entity_name: str) -> Any:
        """Register ``<entity>CustomFilter`` unless a type with that name exists."""
        type_name = build.inflection.filter_type_name(entity_name)
        existing = build.get_type_by_name(type_name)
        if existing is not None:
            _logger.debug("berryfilter: %s already registered; skipping", type_name)
            return existing
        _logger.info("berryfilter: creating input type %s", type_name)
        return build.new_input_type(
            type_name,
            description=filter_type_description(entity_name),
            fields=lambda: {
                PLACEHOLDER_FIELD: {'type': Optional[str], 'description': _PLACEHOLDER_DESCRIPTION},
            },
            scope={'is_custom_filter': True, 'entity_name': entity_name},
        )

    def create_types(self, value: Any, build: Any, context: Any) -> Any:
        for entity_name in self.filters:
            self.create_type(build, entity_name)
        return value

    # ---------- field-population stage ----------
    def resolved_fields(self, build: Any, entity_name: str) -> List[Tuple[FilterSpec, Any]]:
        """Filters of ``entity_name`` whose type resolved, with their annotations.

        Computed once per build; both field population and argument injection
        read this list so an omitted field never gets a modifier.
        """
        per_build = self._resolved.setdefault(build, {})
        if entity_name not in per_build:
            out: List[Tuple[FilterSpec, Any]] = []
            for spec in (self.filters.get(entity_name) or {}).values():
                annotation = self._resolve_spec(build, spec)
                if annotation is not None:
                    out.append((spec, annotation))
            per_build[entity_name] = out
        return per_build[entity_name]

    def _resolve_spec(self, build: Any, spec: FilterSpec) -> Optional[Any]:
        if spec.field_name == PLACEHOLDER_FIELD or not is_valid_type_name(spec.field_name):
            _logger.warning(
                "berryfilter: filter field name %r on %s is not usable; skipped",
                spec.field_name, spec.entity_name,
            )
            return None
        registry = TypeRegistry(build)
        descriptor = parse_type_descriptor(spec.type_descriptor)
        base = registry.resolve(descriptor.base_name)
        if base is None:
            _logger.debug(
                "berryfilter: type %r of filter %s.%s does not resolve; field omitted",
                spec.type_descriptor, spec.entity_name, spec.field_name,
            )
            return None
        if not registry.is_input_type(descriptor.base_name):
            _logger.warning(
                "berryfilter: type %s of filter %s.%s cannot be used as an input; field omitted",
                descriptor.base_name, spec.entity_name, spec.field_name,
            )
            return None
        return registry.wrap(base, descriptor)

    def populate_fields(self, fields: Dict[str, Any], build: Any, context: Any) -> Dict[str, Any]:
        """``input:fields`` hook; ``context`` is the pending input type being finalized."""
        scope = getattr(context, 'scope', None) or {}
        if not scope.get('is_custom_filter'):
            return fields
        type_name = getattr(context, 'name', '')
        entity_name = scope.get('entity_name') or build.inflection.entity_from_filter_type(type_name)
        if entity_name not in self.filters:
            return fields
        custom: Dict[str, Any] = {}
        for spec, annotation in self.resolved_fields(build, entity_name):
            if spec.field_name in fields:
                # Another plugin instance already attached it
                continue
            custom[spec.field_name] = {'type': annotation, 'description': spec.description}
        return build.extend(
            fields,
            custom,
            f"Adding fields to CustomFilter '{type_name}'",
        )
