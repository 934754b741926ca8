from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from typing import Any, Callable, Dict, List

__all__ = ['SchemaBuilder', 'FieldContext', 'INIT', 'INPUT_FIELDS', 'FIELD_ARGS', 'STAGES']

# Build stages, in the order the schema builder runs them
INIT = 'init'
INPUT_FIELDS = 'input:fields'
FIELD_ARGS = 'object:fields:field:args'
STAGES = (INIT, INPUT_FIELDS, FIELD_ARGS)

Hook = Callable[[Any, Any, Any], Any]
# generator(args) -> {'query': callable(query_builder)}
ArgDataGenerator = Callable[[Dict[str, Any]], Dict[str, Any]]


@dataclass
class FieldContext:
    """Context handed to ``object:fields:field:args`` hooks for one field.

    ``scope`` carries ``is_connection``, ``is_simple_collection`` and
    ``source`` (the introspection :class:`~berryfilter.introspection.Source`
    backing the field, if any). ``field`` carries ``name``, ``type`` (the
    return annotation) and ``description``.
    """

    self_name: str
    field: Dict[str, Any]
    scope: Dict[str, Any]
    arg_data_generators: List[ArgDataGenerator] = dc_field(default_factory=list)

    @property
    def field_name(self) -> str:
        return self.field.get('name', '')

    @property
    def identity(self) -> str:
        return f"{self.self_name}.{self.field_name}"

    def add_arg_data_generator(self, fn: ArgDataGenerator) -> None:
        self.arg_data_generators.append(fn)


class SchemaBuilder:
    """Ordered hook registry driving a schema build.

    A hook receives ``(value, build, context)`` and returns the (possibly
    extended) value; hooks of one stage run in registration order, each
    seeing the previous hook's result.
    """

    def __init__(self):
        self._hooks: Dict[str, List[Hook]] = {stage: [] for stage in STAGES}

    def hook(self, stage: str, fn: Hook) -> Hook:
        if stage not in self._hooks:
            raise ValueError(f"Unknown build stage: {stage}")
        self._hooks[stage].append(fn)
        return fn

    def hooks_for(self, stage: str) -> List[Hook]:
        return list(self._hooks.get(stage, ()))

    def apply_hooks(self, stage: str, value: Any, build: Any, context: Any) -> Any:
        for fn in self._hooks.get(stage, ()):
            result = fn(value, build, context)
            if result is None:
                raise ValueError(
                    f"Hook {getattr(fn, '__name__', fn)!r} for stage '{stage}' returned None; "
                    "hooks must return the value they were given (or an extension of it)"
                )
            value = result
        return value
