from __future__ import annotations

import enum
import logging
import re
import warnings
from typing import Annotated, Any, Callable, Dict, List, Optional, Tuple

import strawberry
from sqlalchemy import inspect as sa_inspect
from strawberry.types import Info as StrawberryInfo

from .build import Build, PendingInputType
from .core.naming import DEFAULT_NAMING, NamingConvention, from_camel, python_attr_name
from .core.utils import UNSET, get_db_session, unwrap_annotation
from .hooks import FIELD_ARGS, INIT, INPUT_FIELDS, FieldContext, SchemaBuilder
from .introspection import RelationInfo, Source, columns_of, relations_of
from .sql.builders import QueryBuilder

# Silence Strawberry's LazyType deprecation warnings to keep test output clean.
warnings.filterwarnings("ignore", category=DeprecationWarning, message=r"LazyType is deprecated.*")

# Project logger
_logger = logging.getLogger("berryfilter")

__all__ = ['FilterSchema']

# --- Standard argument descriptions for collection fields ---
_ARG_DESC_FIRST = "Only read the first `n` values of the set."
_ARG_DESC_OFFSET = "Skip the first `n` values. Use together with first."

_IDENT_RE = re.compile(r'\W')


def _collection_args() -> Dict[str, Dict[str, Any]]:
    return {
        'first': {'type': Optional[int], 'description': _ARG_DESC_FIRST},
        'offset': {'type': Optional[int], 'description': _ARG_DESC_OFFSET},
    }


def _is_strawberry_enum(t: Any) -> bool:
    return getattr(t, '_enum_definition', None) is not None or getattr(t, '__strawberry_definition__', None) is not None


class FilterSchema:
    """Registry of data sources + hook-driven Strawberry schema builder.

    Sources are SQLAlchemy ORM models (``table``) and named callables returning
    a ``Select`` (``procedure``). Plugins receive the :class:`SchemaBuilder`
    and register stage hooks; :meth:`to_strawberry` runs the stages:

    1. entity, connection and enum types are registered in the build;
    2. ``init`` hooks run;
    3. pending input types receive their fields (``input:fields`` hooks);
    4. object and root fields are assembled, each field's arguments passing
       through ``object:fields:field:args`` hooks;
    5. everything is decorated with Strawberry and a ``strawberry.Schema``
       is returned.
    """

    def __init__(self, *, naming: Optional[NamingConvention] = None):
        self.naming = naming or DEFAULT_NAMING
        self.sources: Dict[str, Source] = {}
        self._extra_types: List[Tuple[Any, str, str]] = []
        self._plugins: List[Tuple[Callable[..., Any], Dict[str, Any]]] = []
        # State of the last build
        self.build: Optional[Build] = None
        self.plugins: List[Any] = []
        self._object_types: Dict[str, Any] = {}

    # ---------- declaration API ----------
    def table(self, model: Any = None, *, description: Optional[str] = None):
        """Expose an ORM model; usable as ``@schema.table`` or ``schema.table(Model)``."""
        def deco(m):
            desc = description or m.__doc__ or getattr(getattr(m, '__table__', None), 'comment', None)
            self.sources[m.__name__] = Source(kind='table', name=m.__name__, model=m, description=desc)
            return m
        return deco(model) if model is not None else deco

    def procedure(self, name: str, *, returns: Any, fn: Optional[Callable[[], Any]] = None, description: Optional[str] = None):
        """Expose a callable returning a ``Select`` over ``returns`` as a root connection field.

        Example:
            @schema.procedure('activeUsers', returns=User)
            def active_users():
                return select(User).where(User.is_active.is_(True))
        """
        def deco(f):
            self.sources[name] = Source(kind='procedure', name=name, model=returns, fn=f, description=description or f.__doc__)
            return f
        return deco(fn) if fn is not None else deco

    def register_type(self, type_: Any, *, name: Optional[str] = None, kind: str = 'enum') -> Any:
        """Make an existing Strawberry type (enum, scalar, input) resolvable by name."""
        self._extra_types.append((type_, name or type_.__name__, kind))
        return type_

    def plugin(self, fn: Callable[..., Any], options: Optional[Dict[str, Any]] = None) -> "FilterSchema":
        self._plugins.append((fn, dict(options or {})))
        return self

    # ---------- build ----------
    def to_strawberry(self, *, strawberry_config: Any = None) -> strawberry.Schema:
        builder = SchemaBuilder()
        build = Build(self.naming)
        self.build = build
        self._object_types = {}
        self.plugins = [fn(builder, opts) for fn, opts in self._plugins]
        for type_, name, kind in self._extra_types:
            build.add_type(type_, name, kind=kind)

        models: Dict[Any, Optional[Source]] = {}
        for source in self.sources.values():
            if source.kind == 'table':
                models[source.model] = source
            else:
                models.setdefault(source.model, None)
        for model in models:
            self._ensure_entity_types(build, model)

        builder.apply_hooks(INIT, {}, build, {'schema': self})
        self._finalize_inputs(builder, build)

        for model in models:
            self._attach_entity_fields(builder, build, model, models)
        query_cls = self._build_query(builder, build)
        # Inputs registered by field hooks
        self._finalize_inputs(builder, build)

        for name, cls in self._object_types.items():
            strawberry.type(cls, name=name, description=cls.__doc__)
        query = strawberry.type(query_cls, name='Query')
        _logger.info("berryfilter: built schema with %d types", len(build.type_names))
        if strawberry_config is not None:
            return strawberry.Schema(query=query, config=strawberry_config)
        return strawberry.Schema(query=query)

    # ---------- types ----------
    def _new_object_type(self, build: Build, name: str, doc: Optional[str]) -> Any:
        def _factory():
            cls = type(name, (), {'__doc__': doc})
            cls.__module__ = __name__
            self._object_types[name] = cls
            return cls
        return build.ensure_type(name, _factory, kind='object')

    def _ensure_entity_types(self, build: Build, model: Any) -> None:
        entity = model.__name__
        doc = model.__doc__ or getattr(getattr(model, '__table__', None), 'comment', None)
        entity_cls = self._new_object_type(build, entity, doc)
        conn_name = self.naming.connection_type_name(entity)
        conn_cls = self._new_object_type(build, conn_name, f"A connection to a list of `{entity}` values.")
        conn_cls.__annotations__ = {'nodes': List[entity_cls], 'total_count': int}
        # Python enums behind Enum columns become named, filterable enum types
        for annotation in columns_of(model).values():
            inner, _ = unwrap_annotation(annotation)
            if isinstance(inner, type) and issubclass(inner, enum.Enum):
                if not _is_strawberry_enum(inner):
                    strawberry.enum(inner)
                if build.get_type_by_name(inner.__name__) is None:
                    build.add_type(inner, inner.__name__, kind='enum')

    def _finalize_inputs(self, builder: SchemaBuilder, build: Build) -> None:
        pending = build.pop_pending_inputs()
        while pending:
            for p in pending:
                fields = builder.apply_hooks(INPUT_FIELDS, p.fields(), build, p)
                self._decorate_input(p, fields)
            pending = build.pop_pending_inputs()

    @staticmethod
    def _decorate_input(pending: PendingInputType, fields: Dict[str, Dict[str, Any]]) -> None:
        anns: Dict[str, Any] = {}
        for gql_name, spec in fields.items():
            attr = python_attr_name(gql_name)
            anns[attr] = spec['type']
            setattr(pending.cls, attr, strawberry.field(name=gql_name, description=spec.get('description'), default=UNSET))
        pending.cls.__annotations__ = anns
        strawberry.input(pending.cls, name=pending.name, description=pending.description)

    # ---------- fields ----------
    def _attach_entity_fields(self, builder: SchemaBuilder, build: Build, model: Any, models: Dict[Any, Optional[Source]]) -> None:
        entity = model.__name__
        cls = build.get_type_by_name(entity)
        anns: Dict[str, Any] = dict(columns_of(model))
        for rel in relations_of(model):
            if rel.target not in models:
                continue
            target_cls = build.get_type_by_name(rel.target.__name__)
            target_source = models.get(rel.target)
            field_type = List[target_cls] if rel.many else Optional[target_cls]
            context = FieldContext(
                self_name=entity,
                field={'name': rel.name, 'type': field_type, 'description': None},
                scope={'is_connection': False, 'is_simple_collection': rel.many, 'source': target_source},
            )
            args = builder.apply_hooks(FIELD_ARGS, _collection_args() if rel.many else {}, build, context)
            impl = self._make_rows_impl(context, rel.target, target_source, relation=rel)
            setattr(cls, rel.name, strawberry.field(resolver=self._make_resolver(context, args, impl)))
            anns[rel.name] = field_type
        cls.__annotations__ = anns

    def _build_query(self, builder: SchemaBuilder, build: Build) -> Any:
        query_cls = type('Query', (), {'__doc__': 'The root query type.'})
        query_cls.__module__ = __name__
        anns: Dict[str, Any] = {}

        def _add_root(gql_name: str, source: Source, *, connection: bool) -> None:
            entity = source.entity_name
            if connection:
                field_type = build.get_type_by_name(self.naming.connection_type_name(entity))
            else:
                field_type = List[build.get_type_by_name(entity)]
            context = FieldContext(
                self_name='Query',
                field={'name': gql_name, 'type': field_type, 'description': source.description},
                scope={'is_connection': connection, 'is_simple_collection': not connection, 'source': source},
            )
            args = builder.apply_hooks(FIELD_ARGS, _collection_args(), build, context)
            impl = self._make_rows_impl(context, source.model, source, connection=connection)
            attr = from_camel(gql_name)
            setattr(query_cls, attr, strawberry.field(
                resolver=self._make_resolver(context, args, impl),
                name=gql_name,
                description=source.description,
            ))
            anns[attr] = field_type

        for source in self.sources.values():
            if source.kind == 'table':
                _add_root(self.naming.all_rows_field_name(source.entity_name), source, connection=True)
                _add_root(self.naming.list_field_name(source.entity_name), source, connection=False)
            else:
                _add_root(source.name, source, connection=True)
        query_cls.__annotations__ = anns
        return query_cls

    # ---------- resolvers ----------
    def _make_rows_impl(
        self,
        context: FieldContext,
        model: Any,
        source: Optional[Source],
        *,
        connection: bool = False,
        relation: Optional[RelationInfo] = None,
    ):
        naming = self.naming
        build = self.build
        single = relation is not None and not relation.many
        pk_cols = list(sa_inspect(model).primary_key)

        async def _impl(root, info, args: Dict[str, Any]):
            qb = QueryBuilder(model, source.select() if source is not None else None)
            if relation is not None:
                for parent_key, target_attr in relation.pairs:
                    parent_val = getattr(root, parent_key, None)
                    if parent_val is None:
                        return None if single else []
                    qb.where(target_attr == parent_val)
            for generate in context.arg_data_generators:
                data = generate(args) or {}
                apply_query = data.get('query')
                if callable(apply_query):
                    apply_query(qb)
            qb.order_by(*pk_cols)
            session = get_db_session(info)
            if session is None:
                raise RuntimeError("No database session in context; pass context_value={'db_session': session}")
            if single:
                return (await session.execute(qb.statement.limit(1))).scalars().first()
            result = await session.execute(qb.paginated(args.get('first'), args.get('offset')))
            rows = list(result.scalars().all())
            if connection:
                total = await session.scalar(qb.count_statement())
                conn_cls = build.get_type_by_name(naming.connection_type_name(model.__name__))
                return conn_cls(nodes=rows, total_count=int(total or 0))
            return rows

        return _impl

    @staticmethod
    def _make_resolver(context: FieldContext, args_spec: Dict[str, Dict[str, Any]], impl: Callable[..., Any]):
        """Generate ``async def (self, info, <args>=None)`` forwarding an arg bag to ``impl``.

        Strawberry reads argument names and types from the function signature,
        so the signature is generated to match the (hook-extended) argument map.
        """
        params: List[str] = []
        items: List[str] = []
        anns: Dict[str, Any] = {'info': StrawberryInfo}
        for gql_name, spec in args_spec.items():
            py_name = python_attr_name(from_camel(gql_name))
            if py_name in ('self', 'info'):
                py_name += '_'
            params.append(f"{py_name}=None")
            items.append(f"{gql_name!r}: {py_name}")
            anns[py_name] = Annotated[spec['type'], strawberry.argument(name=gql_name, description=spec.get('description'))]
        anns['return'] = context.field.get('type')
        fn_name = _IDENT_RE.sub('_', f"_resolve_{context.self_name}_{context.field_name}")
        src = f"async def {fn_name}(self, info{''.join(', ' + p for p in params)}):\n"
        src += f"    return await _impl(self, info, {{{', '.join(items)}}})\n"
        ns: Dict[str, Any] = {'_impl': impl}
        exec(src, ns)
        fn = ns[fn_name]
        fn.__module__ = __name__
        fn.__annotations__ = anns
        return fn
