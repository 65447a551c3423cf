"""Tests for the uniform repository contract across resource types."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ehrcore.core.errors import ConstraintViolation, NotFound, ReferentialIntegrityViolation
from ehrcore.core.tenant_db import tenant_session
from ehrcore.models.clinical import Condition, ConditionClinicalStatus, Observation, ObservationStatus
from ehrcore.models.clinical_safety import Flag, FlagStatus
from ehrcore.models.conformance import NamingSystem, NamingSystemUniqueId
from ehrcore.models.financial import Account
from ehrcore.models.identity import Encounter, EncounterStatus, Patient
from ehrcore.models.oncology import CancerDiagnosis, TreatmentProtocol
from ehrcore.repositories.clinical import ConditionRepository, ObservationRepository
from ehrcore.repositories.clinical_safety import FlagRepository
from ehrcore.repositories.conformance import NamingSystemRepository
from ehrcore.repositories.financial import AccountRepository
from ehrcore.repositories.identity import EncounterRepository, PatientRepository
from ehrcore.repositories.oncology import CancerDiagnosisRepository, TreatmentProtocolRepository
from tests.conftest import build_patient, create_patient


class TestFlagLifecycle:
    """Create, read, update and delete a Flag in tenant "t1"."""

    def test_flag_lifecycle(self, engine, tenant_id):
        """Every step of the lifecycle should be observable in the next."""
        assert tenant_id == "t1"
        with tenant_session(engine, "t1") as db:
            patient = create_patient(db)
            repo = FlagRepository(db)

            flag = repo.create(Flag(subject_patient_id=patient.id, status="active", code_code="SAFETY-001"))
            assert flag.id is not None
            assert flag.fhir_id

            fetched = repo.get_by_id(flag.id)
            assert fetched.status == FlagStatus.ACTIVE
            assert fetched.code_code == "SAFETY-001"

            period_end = datetime(2024, 6, 1, 12, 30, tzinfo=timezone.utc)
            fetched.status = FlagStatus.INACTIVE
            fetched.period_end = period_end
            repo.update(fetched)

            refetched = repo.get_by_id(flag.id)
            assert refetched.status == FlagStatus.INACTIVE
            assert refetched.period_end == period_end

            repo.delete(flag.id)
            with pytest.raises(NotFound):
                repo.get_by_id(flag.id)

    def test_flag_with_unknown_patient_is_rejected(self, db):
        """A never-persisted patient id should fail referential integrity."""
        flag = Flag(subject_patient_id=uuid.uuid4(), status="active", code_code="SAFETY-001")

        with pytest.raises(ReferentialIntegrityViolation):
            FlagRepository(db).create(flag)
        assert flag.id is None
        assert flag.fhir_id is None

    def test_session_usable_after_failed_write(self, db):
        """A failed create should leave the tenant transaction usable."""
        repo = FlagRepository(db)
        with pytest.raises(ReferentialIntegrityViolation):
            repo.create(Flag(subject_patient_id=uuid.uuid4(), code_code="SAFETY-001"))

        patient = create_patient(db)
        flag = repo.create(Flag(subject_patient_id=patient.id, code_code="SAFETY-002"))
        assert repo.get_by_fhir_id(flag.fhir_id).code_code == "SAFETY-002"


class TestIdentity:
    """Tests for internal and external identity assignment."""

    def test_ids_are_unique_and_distinct(self, db):
        """Every created resource should get distinct internal and external ids."""
        patients = [create_patient(db) for _ in range(5)]

        ids = {p.id for p in patients}
        fhir_ids = {p.fhir_id for p in patients}
        assert len(ids) == 5
        assert len(fhir_ids) == 5
        assert not {str(i) for i in ids} & fhir_ids

    def test_caller_supplied_ids_are_replaced(self, db):
        """Identities are always assigned by the repository."""
        supplied = uuid.uuid4()
        patient = build_patient(id=supplied, fhir_id="caller-chosen")
        created = PatientRepository(db).create(patient)
        assert created.id != supplied
        assert created.fhir_id != "caller-chosen"

    def test_create_from_loaded_record_inserts_a_copy(self, db):
        """Passing a stored record to create() leaves the stored row untouched."""
        repo = NamingSystemRepository(db)
        stored = repo.create(NamingSystem(name="Orig"))
        stored_id, stored_fhir_id = stored.id, stored.fhir_id

        loaded = repo.get_by_id(stored_id)
        loaded.name = "Copy"
        copy = repo.create(loaded)

        assert copy.id != stored_id
        assert copy.fhir_id != stored_fhir_id
        original_row = repo.get_by_id(stored_id)
        assert original_row.name == "Orig"
        assert original_row.fhir_id == stored_fhir_id
        assert repo.get_by_id(copy.id).name == "Copy"
        assert repo.list()[1] == 2

    def test_create_twice_with_same_object(self, db):
        """A record returned by create() can seed another create()."""
        repo = NamingSystemRepository(db)
        first = repo.create(NamingSystem(name="Twice"))
        first_id = first.id
        second = repo.create(first)

        assert second.id != first_id
        assert repo.get_by_id(first_id).name == "Twice"
        assert repo.list()[1] == 2

    def test_add_child_from_loaded_child_inserts_a_copy(self, db):
        repo = NamingSystemRepository(db)
        parent = repo.create(NamingSystem(name="Parent"))
        child = repo.add_unique_id(NamingSystemUniqueId(naming_system_id=parent.id, type="uri", value="http://a"))
        child_id = child.id

        again = repo.add_unique_id(child)

        children = repo.get_unique_ids(parent.id)
        assert again.id != child_id
        assert [c.id for c in children] == [child_id, again.id]

    def test_round_trip_by_both_ids(self, db):
        """get_by_id and get_by_fhir_id should return the same record."""
        created = create_patient(db, first_name="Ada", last_name="Lovelace")
        repo = PatientRepository(db)

        by_id = repo.get_by_id(created.id)
        by_fhir_id = repo.get_by_fhir_id(created.fhir_id)
        assert by_id.id == by_fhir_id.id == created.id
        assert by_id.first_name == "Ada"
        assert by_id.created_at.tzinfo is not None

    def test_get_by_string_id(self, db):
        """A UUID given as a string should be accepted."""
        created = create_patient(db)
        assert PatientRepository(db).get_by_id(str(created.id)).id == created.id


class TestNotFound:
    """Tests for lookups and writes against missing records."""

    @pytest.mark.parametrize("bad_id", ["not-a-uuid", "", None])
    def test_get_by_invalid_id(self, db, bad_id):
        """Unparseable ids cannot exist."""
        with pytest.raises(NotFound):
            PatientRepository(db).get_by_id(bad_id)

    def test_get_by_unknown_id(self, db):
        with pytest.raises(NotFound) as exc_info:
            PatientRepository(db).get_by_id(uuid.uuid4())
        assert exc_info.value.resource_type == "Patient"
        assert str(exc_info.value) == "Patient not found"

    def test_get_by_unknown_fhir_id(self, db):
        with pytest.raises(NotFound):
            PatientRepository(db).get_by_fhir_id("missing")
        with pytest.raises(NotFound):
            PatientRepository(db).get_by_fhir_id("")

    def test_update_unknown_record(self, db):
        """Updating a record that does not exist should raise NotFound."""
        patient = build_patient()
        patient.id = uuid.uuid4()
        with pytest.raises(NotFound):
            PatientRepository(db).update(patient)

    def test_delete_unknown_record(self, db):
        with pytest.raises(NotFound):
            NamingSystemRepository(db).delete(uuid.uuid4())
        with pytest.raises(NotFound):
            NamingSystemRepository(db).delete("garbage")

    def test_delete_is_final(self, db):
        """A deleted record should not be reachable by either id."""
        repo = NamingSystemRepository(db)
        created = repo.create(NamingSystem(name="Temp"))
        repo.delete(created.id)

        with pytest.raises(NotFound):
            repo.get_by_id(created.id)
        with pytest.raises(NotFound):
            repo.get_by_fhir_id(created.fhir_id)
        with pytest.raises(NotFound):
            repo.delete(created.id)


class TestUpdate:
    """Tests for update semantics."""

    def test_update_reflects_all_fields(self, db):
        patient = create_patient(db)
        repo = ObservationRepository(db)
        observation = repo.create(
            Observation(
                patient_id=patient.id,
                status=ObservationStatus.PRELIMINARY,
                code_value="8867-4",
                code_display="Heart rate",
                value_quantity=Decimal("72"),
            )
        )

        observation.status = ObservationStatus.FINAL
        observation.value_quantity = Decimal("75.5")
        observation.note = "repeat measurement"
        repo.update(observation)

        fetched = repo.get_by_id(observation.id)
        assert fetched.status == ObservationStatus.FINAL
        assert fetched.value_quantity == Decimal("75.5")
        assert fetched.note == "repeat measurement"

    def test_update_keeps_identity_and_created_at(self, db):
        """id, fhir_id and created_at never change; updated_at moves forward."""
        repo = NamingSystemRepository(db)
        created = repo.create(NamingSystem(name="Before"))
        loaded = repo.get_by_id(created.id)

        loaded.name = "After"
        loaded.fhir_id = "tampered"
        repo.update(loaded)

        fetched = repo.get_by_id(created.id)
        assert fetched.name == "After"
        assert fetched.fhir_id == created.fhir_id
        assert fetched.created_at == created.created_at
        assert fetched.updated_at >= fetched.created_at

    def test_update_dangling_reference(self, db):
        """Pointing an existing record at a missing patient should fail."""
        patient = create_patient(db)
        repo = EncounterRepository(db)
        encounter = repo.create(
            Encounter(patient_id=patient.id, status=EncounterStatus.PLANNED, class_code="AMB")
        )

        encounter.patient_id = uuid.uuid4()
        with pytest.raises(ReferentialIntegrityViolation):
            repo.update(encounter)


class TestConstraints:
    """Tests for storage constraints surfacing as ConstraintViolation."""

    def test_invalid_status_rejected(self, db):
        """A status outside the enumeration is rejected by the database."""
        with pytest.raises(ConstraintViolation):
            FlagRepository(db).create(Flag(status="bogus", code_code="SAFETY-001"))

    def test_missing_required_field_rejected(self, db):
        with pytest.raises(ConstraintViolation):
            NamingSystemRepository(db).create(NamingSystem(name=None))

    def test_missing_required_reference_rejected(self, db):
        """A NOT NULL reference left empty is a constraint violation."""
        with pytest.raises(ConstraintViolation):
            ConditionRepository(db).create(
                Condition(
                    clinical_status=ConditionClinicalStatus.ACTIVE,
                    code_value="I10",
                    code_display="Essential hypertension",
                )
            )

    def test_duplicate_unique_value_rejected(self, db):
        create_patient(db, mrn="MRN-DUP")
        with pytest.raises(ConstraintViolation):
            create_patient(db, mrn="MRN-DUP")

    def test_delete_referenced_record_rejected(self, db):
        """Deleting a record other records point at is refused."""
        patient = create_patient(db)
        diagnosis = CancerDiagnosisRepository(db).create(
            CancerDiagnosis(patient_id=patient.id, diagnosis_date=datetime(2023, 1, 5, tzinfo=timezone.utc))
        )
        TreatmentProtocolRepository(db).create(
            TreatmentProtocol(cancer_diagnosis_id=diagnosis.id, protocol_name="FOLFOX")
        )

        with pytest.raises(ReferentialIntegrityViolation):
            CancerDiagnosisRepository(db).delete(diagnosis.id)
        assert CancerDiagnosisRepository(db).get_by_id(diagnosis.id).id == diagnosis.id


class TestList:
    """Tests for list pagination."""

    def test_list_defaults_and_total(self, db):
        repo = AccountRepository(db)
        for i in range(25):
            repo.create(Account(name=f"Account {i:02d}"))

        page, total = repo.list()
        assert total == 25
        assert len(page) == 20

        page, total = repo.list(limit=10, offset=20)
        assert total == 25
        assert len(page) == 5

        page, total = repo.list(limit=10, offset=-5)
        assert len(page) == 10

    def test_list_order_is_stable(self, db):
        """Pages should not overlap and together cover every record."""
        repo = AccountRepository(db)
        for i in range(7):
            repo.create(Account(name=f"Account {i}"))

        first, _ = repo.list(limit=4)
        second, _ = repo.list(limit=4, offset=4)
        seen = [a.id for a in first + second]
        assert len(seen) == len(set(seen)) == 7

    def test_configured_page_size(self, db):
        repo = AccountRepository(db, default_page_size=3, max_page_size=5)
        for i in range(8):
            repo.create(Account(name=f"Account {i}"))

        page, total = repo.list()
        assert (len(page), total) == (3, 8)
        page, _ = repo.list(limit=100)
        assert len(page) == 5

    def test_empty_list(self, db):
        page, total = PatientRepository(db).list()
        assert page == []
        assert total == 0

    def test_patient_model_resource_type(self):
        assert Patient.resource_type == "Patient"
        assert PatientRepository.model is Patient
