from datetime import datetime
from typing import Generic, Iterable, List, Optional, Sequence, TypeVar

from sqlalchemy import exists, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import ConstraintViolationError
from ..models.base import DELETED, NOT_DELETED
from ..models.validation import validate_entity
from ..schemas.page import Page, PageRequest
from ..specification import FilterClause, SortSpec, compile_order, compile_predicate

ModelT = TypeVar("ModelT")

class SoftDeleteRepository(Generic[ModelT]):
    """
    Typed access to one soft-deletable table.

    Every read goes through ``_select``/``_count`` which add ``is_delete = 0``,
    and every delete goes through ``_soft_delete_where`` which issues an
    UPDATE. Subclasses build their queries on these helpers only.

    Transactions belong to the caller (see ``database.get_db_session``); the
    repository only flushes.
    """
    model = None

    def __init__(self, db: AsyncSession):
        self.db = db

    def _not_deleted(self):
        return self.model.is_delete == NOT_DELETED

    def _select(self, *criteria):
        return select(self.model).where(self._not_deleted(), *criteria)

    async def _count(self, *criteria) -> int:
        query = select(func.count()).select_from(self.model).where(self._not_deleted(), *criteria)
        return await self.db.scalar(query) or 0

    async def _exists(self, *criteria) -> bool:
        return bool(await self.db.scalar(select(exists().where(self._not_deleted(), *criteria))))

    async def _first(self, *criteria) -> Optional[ModelT]:
        return await self.db.scalar(self._select(*criteria).limit(1))

    async def _list(self, *criteria, order_by: Sequence = (), limit: Optional[int] = None) -> List[ModelT]:
        query = self._select(*criteria).order_by(*order_by)
        if limit is not None:
            query = query.limit(limit)
        return list(await self.db.scalars(query))

    async def _page(self, *criteria, order_by: Sequence, page: PageRequest) -> Page[ModelT]:
        total = await self._count(*criteria)
        query = self._select(*criteria).order_by(*order_by).offset(page.offset).limit(page.page_size)
        records = list(await self.db.scalars(query))
        return Page(records=records, total=total, size=page.page_size, current=page.current)

    async def _soft_delete_where(self, *criteria) -> int:
        """Flag every matching live row as deleted in one UPDATE; returns the row count."""
        query = (
            update(self.model)
            .where(self._not_deleted(), *criteria)
            .values(is_delete=DELETED, update_time=datetime.now())
        )
        result = await self.db.execute(query)
        return result.rowcount

    # Generic operations

    async def get_by_id(self, entity_id: int) -> Optional[ModelT]:
        return await self._first(self.model.id == entity_id)

    async def find_one(self, clauses: Iterable[FilterClause]) -> Optional[ModelT]:
        return await self._first(compile_predicate(self.model, clauses))

    async def find_all(
        self,
        clauses: Iterable[FilterClause] = (),
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[ModelT]:
        return await self._list(
            compile_predicate(self.model, clauses),
            order_by=compile_order(self.model, sort or SortSpec()),
            limit=limit,
        )

    async def find_page(
        self,
        clauses: Iterable[FilterClause],
        sort: Optional[SortSpec],
        page: PageRequest,
    ) -> Page[ModelT]:
        return await self._page(
            compile_predicate(self.model, clauses),
            order_by=compile_order(self.model, sort or SortSpec()),
            page=page,
        )

    async def count(self, clauses: Iterable[FilterClause] = ()) -> int:
        return await self._count(compile_predicate(self.model, clauses))

    async def exists(self, clauses: Iterable[FilterClause]) -> bool:
        return await self._exists(compile_predicate(self.model, clauses))

    async def save(self, entity: ModelT) -> ModelT:
        """
        Insert a new entity or flush changes to a loaded one.

        Constraints are validated first; updates refresh ``update_time``.
        The flush runs in a SAVEPOINT: a storage constraint failure undoes
        only this write, leaves the caller's transaction open and raises
        ConstraintViolationError.
        """
        if entity.id is not None:
            entity.touch()
        validate_entity(entity)
        try:
            async with self.db.begin_nested():
                self.db.add(entity)
                await self.db.flush()
        except IntegrityError as e:
            raise ConstraintViolationError("Data constraint violated") from e
        return entity

    async def soft_delete_by_id(self, entity_id: int) -> bool:
        return await self._soft_delete_where(self.model.id == entity_id) > 0
