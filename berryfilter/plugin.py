from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .arguments import ArgumentInjector
from .core.filters import FilterSpec, normalize_filters
from .dispatch import DEFAULT_ARGUMENT_NAME, ModifierDispatcher
from .hooks import FIELD_ARGS, INIT, INPUT_FIELDS
from .input_types import FilterTypeBuilder

__all__ = ['CustomFilterPlugin', 'CustomFilter']


class CustomFilter:
    """Wired components of one custom filter plugin instance."""

    def __init__(self, filters: Dict[str, Dict[str, FilterSpec]], argument_name: str = DEFAULT_ARGUMENT_NAME):
        self.filters = filters
        self.type_builder = FilterTypeBuilder(filters)
        self.dispatcher = ModifierDispatcher(argument_name)
        self.injector = ArgumentInjector(filters, self.type_builder, self.dispatcher)

    def install(self, builder: Any) -> "CustomFilter":
        builder.hook(INIT, self.type_builder.create_types)
        builder.hook(INPUT_FIELDS, self.type_builder.populate_fields)
        builder.hook(FIELD_ARGS, self.injector.inject)
        return self


def CustomFilterPlugin(builder: Any, options: Optional[Mapping[str, Any]] = None) -> CustomFilter:
    """Install the custom filter hooks on ``builder``.

    Options:
        filters: Filter configuration, either a sequence of entries::

                [{'entityName': 'User', 'fieldName': 'minAge',
                  'typeDescriptor': 'Int', 'modifier': fn,
                  'options': {'description': '...'}}]

            or a mapping ``{'User': {'minAge': {'fieldType': 'Int', 'modifier': fn}}}``.
            ``modifier(query_builder, value, build, context)`` receives the
            :class:`~berryfilter.sql.builders.QueryBuilder` of the field being
            resolved and the filter value.
        argument_name: Name of the injected argument (default ``customFilter``).
    """
    options = options or {}
    plugin = CustomFilter(
        normalize_filters(options.get('filters')),
        argument_name=options.get('argument_name') or DEFAULT_ARGUMENT_NAME,
    )
    return plugin.install(builder)
