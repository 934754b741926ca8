from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from sqlalchemy import func

from .descriptors import parse_type_descriptor

_logger = logging.getLogger("berryfilter")

# modifier(query_builder, value, build, context) -> None
Modifier = Callable[[Any, Any, Any, Any], Any]

# Global operator registry (extensible)
OPERATOR_REGISTRY: Dict[str, Callable[[Any, Any], Any]] = {
    'eq': lambda col, v: col == v,
    'ne': lambda col, v: col != v,
    'lt': lambda col, v: col < v,
    'lte': lambda col, v: col <= v,
    'gt': lambda col, v: col > v,
    'gte': lambda col, v: col >= v,
    'like': lambda col, v: col.like(v),
    'not_like': lambda col, v: ~col.like(v),
    'ilike': lambda col, v: func.lower(col).like(func.lower(v)),
    'not_ilike': lambda col, v: ~func.lower(col).like(func.lower(v)),
    'in': lambda col, v: col.in_(v if isinstance(v, (list, tuple, set)) else [v]),
    'not_in': lambda col, v: ~col.in_(v if isinstance(v, (list, tuple, set)) else [v]),
    'between': lambda col, v: col.between(v[0], v[1]) if isinstance(v, (list, tuple)) and len(v) >= 2 else None,
    'contains': lambda col, v: col.contains(v),
    'starts_with': lambda col, v: col.like(f"{v}%"),
    'ends_with': lambda col, v: col.like(f"%{v}"),
    'is_null': lambda col, v: col.is_(None) if v else col.is_not(None),
}


@dataclass
class FilterSpec:
    """One configured filter field of an entity.

    Attributes:
        entity_name: Singular PascalCase entity the filter targets (``"User"``).
        field_name: Field name inside ``<Entity>CustomFilter``.
        type_descriptor: Value type, e.g. ``"String"`` or ``"[Int!]!"``.
        modifier: ``modifier(query_builder, value, build, context)``; mutates the
            query being built.
        description: Field description; defaults to ``"<baseType> in custom filter"``.
    """

    entity_name: str
    field_name: str
    type_descriptor: str
    modifier: Modifier
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.description is None:
            base = parse_type_descriptor(self.type_descriptor).base_name
            self.description = f"{base} in custom filter"


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in raw and raw[k] is not None:
            return raw[k]
    return None


def normalize_filter_spec(raw: Any, *, entity_name: Optional[str] = None, field_name: Optional[str] = None) -> FilterSpec:
    """Coerce one filter entry (FilterSpec or dict) into a :class:`FilterSpec`.

    ``entity_name``/``field_name`` are supplied by the mapping config form,
    where they are keys rather than entry attributes.
    """
    if isinstance(raw, FilterSpec):
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"Unsupported filter spec form: {raw!r}")
    options = raw.get('options') or {}
    ent = entity_name or _pick(raw, 'entity_name', 'entityName', 'entity')
    fname = field_name or _pick(raw, 'field_name', 'fieldName', 'name')
    tdesc = _pick(raw, 'type_descriptor', 'typeDescriptor', 'field_type', 'fieldType', 'type')
    modifier = raw.get('modifier')
    if not ent or not fname:
        raise ValueError(f"Filter spec needs an entity and a field name: {raw!r}")
    if not isinstance(tdesc, str) or not tdesc:
        raise ValueError(f"Filter '{ent}.{fname}' needs a type descriptor string")
    if not callable(modifier):
        raise ValueError(f"Filter '{ent}.{fname}' needs a callable modifier")
    return FilterSpec(
        entity_name=str(ent),
        field_name=str(fname),
        type_descriptor=tdesc,
        modifier=modifier,
        description=_pick(options, 'description') or _pick(raw, 'description'),
    )


def _iter_specs(filters: Any) -> Iterable[FilterSpec]:
    if filters is None:
        return
    if isinstance(filters, Mapping):
        # {Entity: {fieldName: {fieldType, modifier, options}}}
        for ent, per_entity in filters.items():
            if not isinstance(per_entity, Mapping):
                raise TypeError(f"Filters for '{ent}' must be a mapping of field name to spec")
            for fname, raw in per_entity.items():
                yield normalize_filter_spec(raw, entity_name=ent, field_name=fname)
        return
    for raw in filters:
        yield normalize_filter_spec(raw)


def normalize_filters(filters: Any) -> Dict[str, Dict[str, FilterSpec]]:
    """Group filter specs by entity, preserving configuration order.

    A repeated field name on one entity replaces the earlier spec (last write
    wins) while keeping the position of the first occurrence.
    """
    out: Dict[str, Dict[str, FilterSpec]] = {}
    for spec in _iter_specs(filters):
        per_entity = out.setdefault(spec.entity_name, {})
        if spec.field_name in per_entity:
            _logger.warning(
                "berryfilter: duplicate filter field %s.%s; the later definition (%s) wins",
                spec.entity_name, spec.field_name, spec.type_descriptor,
            )
        per_entity[spec.field_name] = spec
    return out


def operator_modifier(column: str, op: str = 'eq', transform: Optional[Callable[[Any], Any]] = None) -> Modifier:
    """Build a modifier applying a registered operator to ``column``.

    Example:
        {'entityName': 'User', 'fieldName': 'minAge', 'typeDescriptor': 'Int',
         'modifier': operator_modifier('age', 'gte')}
    """
    if op not in OPERATOR_REGISTRY:
        raise ValueError(f"Unknown filter operator: {op}")

    def _modifier(query_builder, value, build, context):
        v = transform(value) if transform is not None else value
        clause = OPERATOR_REGISTRY[op](query_builder.column(column), v)
        if clause is not None:
            query_builder.where(clause)

    _modifier.__name__ = f"_{column}_{op}_modifier"
    return _modifier


def register_operator(name: str, fn: Callable[[Any, Any], Any]) -> None:
    """Add or replace an operator usable by :func:`operator_modifier`."""
    OPERATOR_REGISTRY[name] = fn
