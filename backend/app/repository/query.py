"""Predicate query engine — turns typed predicates and include paths into selects.

A predicate is either a SQLAlchemy boolean expression::

    Villa.id == 5

or a callable that receives the entity class and returns one::

    lambda m: func.lower(m.name) == "pool view"

Include paths name relationships to eager-load alongside the result, dotted
for nesting (``"villa"``, ``"villa.villa_numbers"``).
"""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar, Union

from sqlalchemy import ColumnElement, Select, inspect, select
from sqlalchemy.orm import selectinload

ModelT = TypeVar("ModelT")

Predicate = Union[ColumnElement[bool], Callable[[type[Any]], ColumnElement[bool]]]
OrderBy = Union[Any, Sequence[Any]]


def resolve_predicate(model: type[ModelT], predicate: Predicate | None) -> ColumnElement[bool] | None:
    """Bind a predicate to ``model``. ``None`` means match everything."""
    if predicate is None:
        return None
    if isinstance(predicate, ColumnElement):
        return predicate
    if callable(predicate):
        return predicate(model)
    raise TypeError(f"Unsupported predicate type: {type(predicate).__name__}")


def load_options(model: type[ModelT], includes: Sequence[str] | None) -> list[Any]:
    """Build ``selectinload`` chains for each include path.

    Raises:
        ValueError: if a path segment is not a relationship of its entity.
    """
    options: list[Any] = []
    for path in includes or ():
        current: type[Any] = model
        loader: Any = None
        for segment in path.split("."):
            segment = segment.strip()
            relationships = inspect(current).relationships
            if segment not in relationships:
                raise ValueError(f"Unknown include path {path!r}: {current.__name__} has no relationship {segment!r}")
            attribute = getattr(current, segment)
            loader = selectinload(attribute) if loader is None else loader.selectinload(attribute)
            current = relationships[segment].mapper.class_
        if loader is not None:
            options.append(loader)
    return options


def build_query(
    model: type[ModelT],
    predicate: Predicate | None = None,
    includes: Sequence[str] | None = None,
    order_by: OrderBy | None = None,
    skip: int = 0,
    limit: int | None = None,
) -> Select[tuple[ModelT]]:
    """Compose a select for ``model``.

    No ordering is applied unless ``order_by`` is given.
    """
    query = select(model)

    clause = resolve_predicate(model, predicate)
    if clause is not None:
        query = query.where(clause)

    options = load_options(model, includes)
    if options:
        query = query.options(*options)

    if order_by is not None:
        if isinstance(order_by, (list, tuple)):
            query = query.order_by(*order_by)
        else:
            query = query.order_by(order_by)

    if skip:
        query = query.offset(skip)
    if limit is not None:
        query = query.limit(limit)

    return query
