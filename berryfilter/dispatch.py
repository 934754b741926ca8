from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping

from .core.filters import FilterSpec
from .core.utils import UNSET, extract_field, is_absent

_logger = logging.getLogger("berryfilter")

__all__ = ['ModifierDispatcher', 'DEFAULT_ARGUMENT_NAME']

DEFAULT_ARGUMENT_NAME = 'customFilter'


class ModifierDispatcher:
    """Association table ``(field identity, filter field name) -> FilterSpec``.

    Field identities are ``"<ParentType>.<fieldName>"``. Entries of one field
    keep registration order, which is configuration order; :meth:`dispatch`
    invokes modifiers in that order.
    """

    def __init__(self, argument_name: str = DEFAULT_ARGUMENT_NAME):
        self.argument_name = argument_name
        self._table: Dict[str, Dict[str, FilterSpec]] = {}

    def register(self, field_identity: str, spec: FilterSpec) -> None:
        self._table.setdefault(field_identity, {})[spec.field_name] = spec

    def is_registered(self, field_identity: str) -> bool:
        return bool(self._table.get(field_identity))

    def entries(self, field_identity: str) -> List[FilterSpec]:
        return list((self._table.get(field_identity) or {}).values())

    @property
    def field_identities(self) -> List[str]:
        return list(self._table.keys())

    def dispatch(
        self,
        field_identity: str,
        args: Mapping[str, Any],
        query_builder: Any,
        build: Any = None,
        context: Any = None,
    ) -> int:
        """Invoke the modifiers of ``field_identity`` whose value is present in ``args``.

        Returns the number of modifiers invoked. A missing filter argument
        invokes nothing. Exceptions raised by a modifier propagate.
        """
        custom_filter = (args or {}).get(self.argument_name, UNSET)
        if is_absent(custom_filter):
            return 0
        invoked = 0
        for spec in self.entries(field_identity):
            value = extract_field(custom_filter, spec.field_name)
            if is_absent(value):
                continue
            _logger.debug("berryfilter: %s applying %s=%r", field_identity, spec.field_name, value)
            spec.modifier(query_builder, value, build, context)
            invoked += 1
        return invoked

    def data_generator(self, field_identity: str, build: Any, context: Any) -> Callable[[Mapping[str, Any]], Dict[str, Any]]:
        """Arg data generator for the host: defers dispatch until the query is built."""
        def _generate(args: Mapping[str, Any]) -> Dict[str, Any]:
            return {
                'query': lambda query_builder: self.dispatch(field_identity, args, query_builder, build, context),
            }

        return _generate
