from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .core.filters import FilterSpec
from .core.utils import type_name_of, unwrap_annotation
from .dispatch import ModifierDispatcher
from .input_types import FilterTypeBuilder

_logger = logging.getLogger("berryfilter")

__all__ = ['ArgumentInjector', 'FILTERABLE_SOURCE_KINDS']

FILTERABLE_SOURCE_KINDS = ('table', 'procedure')

_ARG_DESC_CUSTOM_FILTER = 'Custom Filter'


class ArgumentInjector:
    """``object:fields:field:args`` hook adding the custom filter argument.

    For a collection field over a filterable entity it injects the argument
    (typed with the entity's ``<Entity>CustomFilter``), records the entity's
    resolved filters for the field in the dispatcher and hands the host one
    arg data generator that runs them.
    """

    def __init__(
        self,
        filters: Dict[str, Dict[str, FilterSpec]],
        type_builder: FilterTypeBuilder,
        dispatcher: ModifierDispatcher,
    ):
        self.filters = filters
        self.type_builder = type_builder
        self.dispatcher = dispatcher

    def entity_for_field(self, build: Any, context: Any) -> Optional[str]:
        """Entity whose filters apply to the field, or None when the field is not filterable."""
        scope = getattr(context, 'scope', None) or {}
        if not (scope.get('is_connection') or scope.get('is_simple_collection')):
            return None
        source = scope.get('source')
        if source is None or getattr(source, 'kind', None) not in FILTERABLE_SOURCE_KINDS:
            return None
        field = getattr(context, 'field', None) or {}
        inner, _ = unwrap_annotation(field.get('type'))
        type_name = type_name_of(inner)
        entity_name = build.inflection.entity_from_type_name(type_name, self.filters) if type_name else None
        if not entity_name or entity_name not in self.filters:
            _logger.debug("berryfilter: no custom filters for %s (return type %s)", context.identity, type_name)
            return None
        return entity_name

    def inject(self, args: Dict[str, Any], build: Any, context: Any) -> Dict[str, Any]:
        entity_name = self.entity_for_field(build, context)
        if entity_name is None:
            return args
        filter_type = build.get_type_by_name(build.inflection.filter_type_name(entity_name))
        if filter_type is None:
            return args
        arg_name = self.dispatcher.argument_name
        if arg_name not in args:
            args = build.extend(
                args,
                {arg_name: {'type': Optional[filter_type], 'description': _ARG_DESC_CUSTOM_FILTER}},
                f"Adding custom filter arg to field '{context.identity}'",
            )
        identity = context.identity
        first_visit = not self.dispatcher.is_registered(identity)
        for spec, _annotation in self.type_builder.resolved_fields(build, entity_name):
            self.dispatcher.register(identity, spec)
        if first_visit and self.dispatcher.is_registered(identity):
            context.add_arg_data_generator(self.dispatcher.data_generator(identity, build, context))
            _logger.debug(
                "berryfilter: %s filters %s by %s",
                identity, entity_name, [s.field_name for s in self.dispatcher.entries(identity)],
            )
        return args
