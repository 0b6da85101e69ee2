"""
Data-driven query specifications.

A query is described as an ordered list of ``FilterClause`` values
(field, operator, value) plus a ``SortSpec``. ``compile_predicate`` and
``compile_order`` turn them into SQLAlchemy expressions for a given model, so
services never build storage-specific callables themselves.

The not-deleted restriction is not part of a specification; repositories add
it to every statement.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic.alias_generators import to_snake
from sqlalchemy import and_, inspect, true

from .exceptions import ParameterValidationError

class Operator(str, Enum):
    EQ = "eq"
    CONTAINS = "contains"
    GE = "ge"
    GT = "gt"
    LE = "le"
    LT = "lt"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"

@dataclass(frozen=True)
class FilterClause:
    field: str
    operator: Operator
    value: Any = None

_OPERATORS = {
    Operator.EQ: lambda column, value: column == value,
    # LIKE with % and _ escaped; case-sensitive on Postgres and on SQLite with case_sensitive_like
    Operator.CONTAINS: lambda column, value: column.contains(value, autoescape=True),
    Operator.GE: lambda column, value: column >= value,
    Operator.GT: lambda column, value: column > value,
    Operator.LE: lambda column, value: column <= value,
    Operator.LT: lambda column, value: column < value,
    Operator.IS_NULL: lambda column, value: column.is_(None),
    Operator.IS_NOT_NULL: lambda column, value: column.is_not(None),
}

def _column(model, field: str):
    if field not in inspect(model).columns:
        raise ParameterValidationError(f"Unknown field: {field}")
    return getattr(model, field)

def compile_predicate(model, clauses: Iterable[FilterClause]):
    """AND of every clause; an empty list compiles to TRUE."""
    predicates = [_OPERATORS[c.operator](_column(model, c.field), c.value) for c in clauses]
    return and_(*predicates) if predicates else true()

def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())

class ClauseList:
    """Collects clauses, skipping blank values."""

    def __init__(self):
        self.clauses: List[FilterClause] = []

    def add(self, field: str, operator: Operator, value: Any = None) -> "ClauseList":
        if operator in (Operator.IS_NULL, Operator.IS_NOT_NULL) or not _is_blank(value):
            self.clauses.append(FilterClause(field, operator, value))
        return self

    def eq(self, field: str, value: Any) -> "ClauseList":
        return self.add(field, Operator.EQ, value)

    def contains(self, field: str, value: Optional[str]) -> "ClauseList":
        return self.add(field, Operator.CONTAINS, value)

def _require(request):
    if request is None:
        raise ParameterValidationError("Query request is required")

def user_query_clauses(request) -> List[FilterClause]:
    _require(request)
    return (
        ClauseList()
        .eq("id", request.id)
        .eq("user_role", request.user_role)
        .contains("user_account", request.user_account)
        .contains("user_name", request.user_name)
        .contains("user_profile", request.user_profile)
        .clauses
    )

def app_query_clauses(request) -> List[FilterClause]:
    _require(request)
    return (
        ClauseList()
        .eq("id", request.id)
        .eq("code_gen_type", request.code_gen_type)
        .eq("deploy_key", request.deploy_key)
        .eq("priority", request.priority)
        .eq("user_id", request.user_id)
        .contains("app_name", request.app_name)
        .contains("cover", request.cover)
        .contains("init_prompt", request.init_prompt)
        .clauses
    )

def chat_history_query_clauses(request) -> List[FilterClause]:
    _require(request)
    return (
        ClauseList()
        .eq("id", request.id)
        .eq("message_type", request.message_type)
        .eq("app_id", request.app_id)
        .eq("user_id", request.user_id)
        .contains("message", request.message)
        .add("create_time", Operator.LT, request.last_create_time)
        .clauses
    )

# Sorting

DEFAULT_SORT_FIELD = "create_time"
ASCEND = "ascend"

SORTABLE_FIELDS = {
    "user": frozenset({"id", "user_account", "user_name", "user_role", "create_time", "update_time", "edit_time"}),
    "app": frozenset({"id", "app_name", "code_gen_type", "priority", "deployed_time",
                      "create_time", "update_time", "edit_time"}),
    "chat_history": frozenset({"id", "message_type", "create_time", "update_time"}),
}

@dataclass(frozen=True)
class SortSpec:
    field: str = DEFAULT_SORT_FIELD
    ascending: bool = False

def resolve_sort(model, sort_field: Optional[str] = None, sort_order: Optional[str] = None) -> SortSpec:
    """
    Default is create_time descending. Only the exact token "ascend" sorts
    ascending. Field names may be camelCase or snake_case but must be on the
    model's allow-list.
    """
    field = DEFAULT_SORT_FIELD if _is_blank(sort_field) else to_snake(sort_field.strip())
    if field not in SORTABLE_FIELDS[model.__tablename__]:
        raise ParameterValidationError(f"Unsupported sort field: {sort_field}")
    return SortSpec(field, sort_order == ASCEND)

def compile_order(model, sort: SortSpec) -> list:
    column = getattr(model, sort.field)
    if sort.ascending:
        return [column.asc(), model.id.asc()]
    return [column.desc(), model.id.desc()]
