from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import func, select
from sqlalchemy.sql import Select

__all__ = ['QueryBuilder']


class QueryBuilder:
    """Mutable handle over the SQLAlchemy ``Select`` of one collection field.

    Modifiers receive this object and call :meth:`where` / :meth:`order_by`;
    the builder keeps replacing its immutable ``statement`` with the refined one.
    """

    def __init__(self, model: Any, statement: Optional[Select] = None):
        self.model = model
        self.statement: Select = statement if statement is not None else select(model)
        self.where_clauses: List[Any] = []

    def column(self, name: str) -> Any:
        """ORM attribute of the model by name."""
        attr = getattr(self.model, name, None)
        if attr is None:
            raise ValueError(f"Unknown column '{name}' on {getattr(self.model, '__name__', self.model)}")
        return attr

    def where(self, clause: Any) -> "QueryBuilder":
        self.statement = self.statement.where(clause)
        self.where_clauses.append(clause)
        return self

    def order_by(self, *clauses: Any) -> "QueryBuilder":
        self.statement = self.statement.order_by(*clauses)
        return self

    def count_statement(self) -> Select:
        return select(func.count()).select_from(self.statement.order_by(None).subquery())

    def paginated(self, first: Optional[int] = None, offset: Optional[int] = None) -> Select:
        stmt = self.statement
        if offset is not None:
            stmt = stmt.offset(int(offset))
        if first is not None:
            stmt = stmt.limit(int(first))
        return stmt
