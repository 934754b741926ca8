from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from .core.naming import DEFAULT_NAMING, NamingConvention

_logger = logging.getLogger("berryfilter")

__all__ = ['Build', 'PendingInputType', 'INPUT_KINDS']

# Type kinds that may appear in an input position
INPUT_KINDS = frozenset(('scalar', 'enum', 'input'))

FieldsSpec = Dict[str, Dict[str, Any]]


@dataclass
class PendingInputType:
    """An input type registered by name whose field set is not attached yet."""

    name: str
    cls: Any
    description: Optional[str]
    fields: Callable[[], FieldsSpec]
    scope: Dict[str, Any] = field(default_factory=dict)


class Build:
    """Shared state of one schema build.

    Holds the live named-type table. New names enter it only through
    :meth:`ensure_type` (create-if-absent) or :meth:`add_type`; an existing
    name is never overwritten.
    """

    def __init__(self, inflection: Optional[NamingConvention] = None):
        self.inflection: NamingConvention = inflection or DEFAULT_NAMING
        self._types: Dict[str, Any] = {}
        self._kinds: Dict[str, str] = {}
        self._pending_inputs: Dict[str, PendingInputType] = {}

    # ---------- type table ----------
    def get_type_by_name(self, name: str) -> Optional[Any]:
        return self._types.get(name)

    def type_kind(self, name: str) -> Optional[str]:
        return self._kinds.get(name)

    def is_input_type(self, name: str) -> bool:
        return self._kinds.get(name) in INPUT_KINDS

    def ensure_type(self, name: str, factory: Callable[[], Any], *, kind: str = 'object') -> Any:
        """Return the type registered as ``name``, creating it with ``factory`` if absent."""
        existing = self._types.get(name)
        if existing is not None:
            return existing
        created = factory()
        self._types[name] = created
        self._kinds[name] = kind
        _logger.debug("berryfilter: registered %s type %s", kind, name)
        return created

    def add_type(self, type_: Any, name: Optional[str] = None, *, kind: str = 'object') -> Any:
        tname = name or getattr(type_, '__name__', None)
        if not tname:
            raise ValueError(f"Cannot register unnamed type: {type_!r}")
        existing = self._types.get(tname)
        if existing is not None and existing is not type_:
            raise ValueError(f"A different type named '{tname}' is already registered")
        return self.ensure_type(tname, lambda: type_, kind=kind)

    @property
    def type_names(self) -> List[str]:
        return list(self._types.keys())

    # ---------- deferred input types ----------
    def new_input_type(
        self,
        name: str,
        *,
        description: Optional[str] = None,
        fields: Callable[[], FieldsSpec],
        scope: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Register a placeholder input class; its fields are attached at finalize time.

        The class object registered here is the one later decorated with
        ``strawberry.input``, so references taken before finalization stay valid.
        """
        def _factory():
            cls = type(name, (), {'__doc__': description})
            cls.__module__ = __name__
            self._pending_inputs[name] = PendingInputType(
                name=name, cls=cls, description=description, fields=fields, scope=dict(scope or {}),
            )
            return cls

        return self.ensure_type(name, _factory, kind='input')

    def pop_pending_inputs(self) -> List[PendingInputType]:
        pending = list(self._pending_inputs.values())
        self._pending_inputs.clear()
        return pending

    # ---------- field/arg maps ----------
    @staticmethod
    def extend(base: Mapping[str, Any], extra: Mapping[str, Any], hint: str = '') -> Dict[str, Any]:
        """Merge ``extra`` into a copy of ``base``; an existing key is never replaced."""
        out = dict(base)
        for k, v in extra.items():
            if k in out:
                raise ValueError(f"Overwriting key '{k}' is not allowed. {hint}".strip())
            out[k] = v
        return out
