from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import inspect, select
from sqlalchemy.sql import Select
from sqlalchemy.orm import RelationshipDirection

from .core.utils import sa_python_type

__all__ = ['Source', 'RelationInfo', 'columns_of', 'relations_of']


@dataclass
class Source:
    """A data source exposed as collection fields.

    kind:
        ``'table'``: an ORM model; rows are ``select(model)``.
        ``'procedure'``: a named callable returning a ``Select`` over ``model``
        (the Python counterpart of a set-returning function).
    """

    kind: str
    name: str
    model: Any
    fn: Optional[Callable[[], Select]] = None
    description: Optional[str] = None

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def select(self) -> Select:
        if self.kind == 'procedure' and self.fn is not None:
            return self.fn()
        return select(self.model)


@dataclass
class RelationInfo:
    name: str
    target: Any
    many: bool
    # (parent attribute key, target ORM attribute) pairs used to correlate rows
    pairs: List[tuple]


def columns_of(model: Any) -> Dict[str, Any]:
    """Attribute name -> annotation for every mapped column of ``model``."""
    mapper = inspect(model)
    out: Dict[str, Any] = {}
    for attr in mapper.column_attrs:
        col = attr.columns[0]
        py_t = sa_python_type(col)
        out[attr.key] = Optional[py_t] if getattr(col, 'nullable', True) else py_t
    return out


def relations_of(model: Any) -> List[RelationInfo]:
    mapper = inspect(model)
    out: List[RelationInfo] = []
    for rel in mapper.relationships:
        if rel.direction is RelationshipDirection.MANYTOMANY:
            continue
        target = rel.mapper.class_
        target_mapper = rel.mapper
        pairs = []
        for local_col, remote_col in rel.local_remote_pairs:
            parent_key = mapper.get_property_by_column(local_col).key
            target_key = target_mapper.get_property_by_column(remote_col).key
            pairs.append((parent_key, getattr(target, target_key)))
        out.append(RelationInfo(
            name=rel.key,
            target=target,
            many=rel.direction is RelationshipDirection.ONETOMANY,
            pairs=pairs,
        ))
    return out
