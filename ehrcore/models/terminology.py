# ehrcore/models/terminology.py
"""
Reference code tables (LOINC, ICD-10, SNOMED CT, RxNorm, CPT).

One copy per namespace, keyed by the natural code. Rows are loaded by
external tooling and only read through the terminology repositories.
"""

from sqlalchemy import String, text
from sqlalchemy.orm import Mapped, mapped_column

from ehrcore.models.base import Base, TenantTable


class LoincCode(TenantTable, Base):
    __tablename__ = "reference_loinc"

    code: Mapped[str] = mapped_column(String(20), primary_key=True)
    display: Mapped[str] = mapped_column(String(255), nullable=False)
    component: Mapped[str | None] = mapped_column(String(100), nullable=True)
    property: Mapped[str | None] = mapped_column(String(50), nullable=True)
    time_aspect: Mapped[str | None] = mapped_column(String(20), nullable=True)
    system_uri: Mapped[str] = mapped_column(
        String(255), nullable=False, default="http://loinc.org", server_default=text("'http://loinc.org'")
    )
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)


class Icd10Code(TenantTable, Base):
    __tablename__ = "reference_icd10"

    code: Mapped[str] = mapped_column(String(10), primary_key=True)
    display: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    chapter: Mapped[str | None] = mapped_column(String(10), nullable=True)
    system_uri: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="http://hl7.org/fhir/sid/icd-10-cm",
        server_default=text("'http://hl7.org/fhir/sid/icd-10-cm'"),
    )


class SnomedCode(TenantTable, Base):
    __tablename__ = "reference_snomed"

    code: Mapped[str] = mapped_column(String(20), primary_key=True)
    display: Mapped[str] = mapped_column(String(500), nullable=False)
    semantic_tag: Mapped[str | None] = mapped_column(String(50), nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    system_uri: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="http://snomed.info/sct",
        server_default=text("'http://snomed.info/sct'"),
    )


class RxNormCode(TenantTable, Base):
    __tablename__ = "reference_medication"

    rxnorm_code: Mapped[str] = mapped_column(String(20), primary_key=True)
    display: Mapped[str] = mapped_column(String(500), nullable=False)
    generic_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    drug_class: Mapped[str | None] = mapped_column(String(100), nullable=True)
    route: Mapped[str | None] = mapped_column(String(50), nullable=True)
    form: Mapped[str | None] = mapped_column(String(50), nullable=True)
    system_uri: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="http://www.nlm.nih.gov/research/umls/rxnorm",
        server_default=text("'http://www.nlm.nih.gov/research/umls/rxnorm'"),
    )


class CptCode(TenantTable, Base):
    __tablename__ = "reference_cpt"

    code: Mapped[str] = mapped_column(String(10), primary_key=True)
    display: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    subcategory: Mapped[str | None] = mapped_column(String(100), nullable=True)
    system_uri: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="http://www.ama-assn.org/go/cpt",
        server_default=text("'http://www.ama-assn.org/go/cpt'"),
    )
