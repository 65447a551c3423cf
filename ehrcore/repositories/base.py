# ehrcore/repositories/base.py
"""
Uniform repository contract shared by every tenant-scoped resource type.

A repository is built around a Session handed out by the tenant scope
(ehrcore.core.tenant_db). It never opens or commits the surrounding
transaction itself: every write runs in its own SAVEPOINT so a failed write
leaves the tenant transaction usable, and the scope commits on success.

Returned records are detached from the session; mutate them freely and pass
them back to update().
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, ClassVar, Generic, Mapping, TypeVar

from sqlalchemy import delete, func, inspect, select, update
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session, make_transient

from ehrcore.core.config import DEFAULT_MAX_PAGE_SIZE, DEFAULT_PAGE_SIZE
from ehrcore.core.errors import NotFound, ReferentialIntegrityViolation, classify_integrity_error
from ehrcore.models.base import ChildMixin, ResourceMixin
from ehrcore.repositories.search import SearchParam, build_predicates, token
from ehrcore.schemas.search import PageRequest
from ehrcore.utils.datetime_utils import utc_now
from ehrcore.utils.id_generators import generate_fhir_id

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=ResourceMixin)
ChildT = TypeVar("ChildT", bound=ChildMixin)

# Never written by update()
IMMUTABLE_FIELDS = frozenset({"id", "fhir_id", "created_at", "updated_at"})


def coerce_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    if value is None:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class ResourceRepository(Generic[ModelT]):
    """
    Create / GetByID / GetByFHIRID / Update / Delete / Search / List for one model.

    Subclasses declare:
    - model:         the mapped resource class
    - search_params: allow-list of filter keys (``_id`` is always accepted)
    """

    model: ClassVar[type]
    search_params: ClassVar[dict[str, SearchParam]] = {}

    def __init__(
        self,
        db: Session,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ):
        self.db = db
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    @property
    def resource_type(self) -> str:
        return self.model.resource_type

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, resource: ModelT) -> ModelT:
        """
        Assign both identities and insert the row.

        Always inserts: a record that was loaded or created earlier is
        turned back into a new one, so the stored row keeps its identities.
        On failure the identities are cleared again and the error is raised
        as ReferentialIntegrityViolation or ConstraintViolation.
        """
        make_transient(resource)
        now = utc_now()
        resource.id = uuid.uuid4()
        resource.fhir_id = generate_fhir_id()
        resource.created_at = now
        resource.updated_at = now
        try:
            with self.db.begin_nested():
                self.db.add(resource)
                self.db.flush()
        except (IntegrityError, DataError) as exc:
            resource.id = None
            resource.fhir_id = None
            raise classify_integrity_error(exc, self.resource_type) from exc

        self.db.expunge(resource)
        return resource

    def update(self, resource: ModelT) -> ModelT:
        """
        Full-row update of every mutable column, keyed by internal identity.

        Last writer wins: there is no version check.
        """
        resource_id = coerce_uuid(resource.id)
        if resource_id is None:
            raise NotFound(self.resource_type, resource.id)

        now = utc_now()
        values = {key: getattr(resource, key) for key in self._mutable_fields()}
        values["updated_at"] = now
        stmt = (
            update(self.model)
            .where(self.model.id == resource_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            with self.db.begin_nested():
                result = self.db.execute(stmt)
        except (IntegrityError, DataError) as exc:
            raise classify_integrity_error(exc, self.resource_type) from exc

        if result.rowcount == 0:
            raise NotFound(self.resource_type, resource.id)

        resource.updated_at = now
        return resource

    def delete(self, id: uuid.UUID | str) -> None:
        """Hard delete; owned children go with it (ON DELETE CASCADE)."""
        resource_id = coerce_uuid(id)
        if resource_id is None:
            raise NotFound(self.resource_type, id)

        stmt = (
            delete(self.model)
            .where(self.model.id == resource_id)
            .execution_options(synchronize_session=False)
        )
        try:
            with self.db.begin_nested():
                result = self.db.execute(stmt)
        except (IntegrityError, DataError) as exc:
            raise classify_integrity_error(exc, self.resource_type) from exc

        if result.rowcount == 0:
            raise NotFound(self.resource_type, id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, id: uuid.UUID | str) -> ModelT:
        resource_id = coerce_uuid(id)
        if resource_id is None:
            raise NotFound(self.resource_type, id)
        return self._get_one(self.model.id == resource_id, id)

    def get_by_fhir_id(self, fhir_id: str) -> ModelT:
        if not fhir_id:
            raise NotFound(self.resource_type, fhir_id)
        return self._get_one(self.model.fhir_id == fhir_id, fhir_id)

    def search(
        self,
        filters: Mapping[str, str] | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> tuple[list[ModelT], int]:
        """
        Returns (page, total). total counts every match before limit/offset.
        """
        predicates = build_predicates(self.model, self.all_search_params(), filters)
        return self._page(predicates, limit, offset)

    def list(self, limit: int = 0, offset: int = 0) -> tuple[list[ModelT], int]:
        return self._page([], limit, offset)

    @classmethod
    def all_search_params(cls) -> dict[str, SearchParam]:
        params = {"_id": token("fhir_id")}
        params.update(cls.search_params)
        return params

    # ------------------------------------------------------------------
    # Child records
    # ------------------------------------------------------------------

    def _add_child(self, child_model: type[ChildT], child: ChildT) -> ChildT:
        parent_key = child_model.parent_key
        parent_id = coerce_uuid(getattr(child, parent_key))
        if parent_id is None:
            raise ReferentialIntegrityViolation(f"{child_model.__name__} requires an existing {self.resource_type}")
        make_transient(child)
        child.id = uuid.uuid4()
        setattr(child, parent_key, parent_id)

        parent_column = getattr(child_model, parent_key)
        try:
            with self.db.begin_nested():
                # Insertion order within the parent
                child.seq = self.db.execute(
                    select(func.coalesce(func.max(child_model.seq), 0) + 1).where(parent_column == parent_id)
                ).scalar_one()
                self.db.add(child)
                self.db.flush()
        except (IntegrityError, DataError) as exc:
            raise classify_integrity_error(exc, child_model.__name__) from exc

        self.db.expunge(child)
        return child

    def _get_children(self, child_model: type[ChildT], parent_id: uuid.UUID | str) -> list[ChildT]:
        parent_uuid = coerce_uuid(parent_id)
        if parent_uuid is None:
            return []

        order_by = []
        if child_model.sequence_key:
            sequence_column = getattr(child_model, child_model.sequence_key)
            # NULLS LAST, portable
            order_by += [sequence_column.is_(None), sequence_column]
        order_by += [child_model.seq, child_model.id]

        stmt = (
            select(child_model)
            .where(getattr(child_model, child_model.parent_key) == parent_uuid)
            .order_by(*order_by)
            .execution_options(populate_existing=True)
        )
        children = list(self.db.execute(stmt).scalars())
        for child in children:
            self.db.expunge(child)
        return children

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_one(self, criterion, key) -> ModelT:
        stmt = select(self.model).where(criterion).execution_options(populate_existing=True)
        resource = self.db.execute(stmt).scalar_one_or_none()
        if resource is None:
            raise NotFound(self.resource_type, key)
        self.db.expunge(resource)
        return resource

    def _page(self, predicates, limit: int, offset: int) -> tuple[list[ModelT], int]:
        page = PageRequest(
            limit=limit,
            offset=offset,
            default_size=self.default_page_size,
            max_size=self.max_page_size,
        )

        total = self.db.execute(
            select(func.count()).select_from(self.model).where(*predicates)
        ).scalar_one()

        stmt = (
            select(self.model)
            .where(*predicates)
            .order_by(self.model.created_at, self.model.id)
            .limit(page.limit)
            .offset(page.offset)
            .execution_options(populate_existing=True)
        )
        results = list(self.db.execute(stmt).scalars())
        for resource in results:
            self.db.expunge(resource)
        return results, total

    def _mutable_fields(self) -> list[str]:
        return [attr.key for attr in inspect(self.model).column_attrs if attr.key not in IMMUTABLE_FIELDS]
