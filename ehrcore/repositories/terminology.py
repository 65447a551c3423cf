# ehrcore/repositories/terminology.py
"""
Read-only lookups over the per-namespace reference code tables.

search() is a case-insensitive substring match over the code and the
system's descriptive columns, ordered by code. get_by_code() is an exact
match. No write path is exposed.
"""

from __future__ import annotations

from typing import ClassVar, Generic, TypeVar

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ehrcore.core.config import DEFAULT_MAX_PAGE_SIZE, DEFAULT_PAGE_SIZE
from ehrcore.core.errors import NotFound
from ehrcore.models.terminology import CptCode, Icd10Code, LoincCode, RxNormCode, SnomedCode
from ehrcore.repositories.search import LIKE_ESCAPE, escape_like

CodeT = TypeVar("CodeT")


class TerminologyRepository(Generic[CodeT]):
    model: ClassVar[type]
    code_system: ClassVar[str]
    code_field: ClassVar[str] = "code"
    search_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, db: Session):
        self.db = db

    def search(self, text: str, limit: int = 0) -> list[CodeT]:
        if limit <= 0:
            limit = DEFAULT_PAGE_SIZE
        limit = min(limit, DEFAULT_MAX_PAGE_SIZE)

        pattern = "%" + escape_like(text or "") + "%"
        columns = [getattr(self.model, name) for name in (self.code_field, *self.search_fields)]
        stmt = (
            select(self.model)
            .where(or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns)))
            .order_by(getattr(self.model, self.code_field))
            .limit(limit)
        )
        results = list(self.db.execute(stmt).scalars())
        for row in results:
            self.db.expunge(row)
        return results

    def get_by_code(self, code: str) -> CodeT:
        row = self.db.execute(
            select(self.model).where(getattr(self.model, self.code_field) == code)
        ).scalar_one_or_none()
        if row is None:
            raise NotFound(self.code_system, code)
        self.db.expunge(row)
        return row


class LoincRepository(TerminologyRepository[LoincCode]):
    model = LoincCode
    code_system = "LOINC"
    search_fields = ("display", "component", "category")


class Icd10Repository(TerminologyRepository[Icd10Code]):
    model = Icd10Code
    code_system = "ICD-10"
    search_fields = ("display", "category")


class SnomedRepository(TerminologyRepository[SnomedCode]):
    model = SnomedCode
    code_system = "SNOMED"
    search_fields = ("display", "semantic_tag", "category")


class RxNormRepository(TerminologyRepository[RxNormCode]):
    model = RxNormCode
    code_system = "RxNorm"
    code_field = "rxnorm_code"
    search_fields = ("display", "generic_name", "drug_class")


class CptRepository(TerminologyRepository[CptCode]):
    model = CptCode
    code_system = "CPT"
    search_fields = ("display", "category", "subcategory")
