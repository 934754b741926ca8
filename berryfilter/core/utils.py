from __future__ import annotations

import uuid as _py_uuid
from datetime import date, datetime
from typing import Any, List, Optional, get_args, get_origin, Union

import strawberry
from sqlalchemy.sql.sqltypes import (
    JSON as SA_JSON,
    Boolean,
    Date,
    DateTime,
    Enum as SAEnumType,
    Float,
    Integer,
    Numeric,
    String,
    Uuid as SA_Uuid,
)
from strawberry.scalars import JSON as ST_JSON

UNSET = getattr(strawberry, 'UNSET')

_SESSION_KEYS = ('db_session', 'db', 'session', 'async_session')


def get_db_session(info_or_ctx: Any) -> Any | None:
    """Best-effort extraction of an AsyncSession-like object from context.

    Accepts either a Strawberry ``Info`` or a plain context object/dict. Tries
    common keys/attributes in order: ``db_session``, ``db``, ``session``,
    ``async_session``.

    Returns:
        The session object if found; otherwise ``None``.
    """
    if info_or_ctx is None:
        return None
    ctx = getattr(info_or_ctx, 'context', info_or_ctx)
    if ctx is None:
        return None
    get = getattr(ctx, 'get', None)
    for k in _SESSION_KEYS:
        v = get(k, None) if callable(get) else getattr(ctx, k, None)
        if v is not None:
            return v
    return None


def is_absent(value: Any) -> bool:
    """True for values a filter treats as "not supplied" (UNSET or null)."""
    return value is None or value is UNSET


def extract_field(container: Any, name: str) -> Any:
    """Read ``name`` from a dict or an input object; UNSET when missing."""
    if is_absent(container):
        return UNSET
    if isinstance(container, dict):
        return container.get(name, UNSET)
    from .naming import python_attr_name
    return getattr(container, python_attr_name(name), UNSET)


def sa_python_type(sqlatype: Any) -> Any:
    """Map a SQLAlchemy column type (or Column) to a Python annotation type.

    Defaults to str for unknown types (safe GraphQL scalar mapping).
    """
    if hasattr(sqlatype, 'type') and hasattr(sqlatype, 'info'):
        sqlatype = sqlatype.type
    # Enum is a String subclass; check it first
    if isinstance(sqlatype, SAEnumType):
        enum_cls = getattr(sqlatype, 'enum_class', None)
        if enum_cls is not None:
            return enum_cls
        return str
    if isinstance(sqlatype, Boolean):
        return bool
    if isinstance(sqlatype, Integer):
        return int
    if isinstance(sqlatype, DateTime):
        return datetime
    if isinstance(sqlatype, Date):
        return date
    if isinstance(sqlatype, (Float, Numeric)):
        return float
    if isinstance(sqlatype, SA_Uuid):
        return _py_uuid.UUID
    if isinstance(sqlatype, SA_JSON):
        return ST_JSON
    if isinstance(sqlatype, String):
        return str
    return str


def unwrap_annotation(annotation: Any) -> tuple[Any, bool]:
    """Strip Optional and one level of List from an annotation.

    Returns ``(inner, was_list)``.
    """
    def _strip_optional(t: Any) -> Any:
        if get_origin(t) is Union:
            args = [a for a in get_args(t) if a is not type(None)]
            if len(args) == 1:
                return args[0]
        return t

    t = _strip_optional(annotation)
    if get_origin(t) in (list, List):
        args = get_args(t)
        return (_strip_optional(args[0]) if args else Any), True
    return t, False


def type_name_of(annotation: Any) -> Optional[str]:
    """GraphQL name of a (bare) generated type; classes are created with their GraphQL name."""
    name = getattr(annotation, '__name__', None)
    return name if isinstance(name, str) else None
