"""Smoke tests for domain repositories not covered elsewhere."""

from datetime import date, datetime, timezone
from decimal import Decimal

from ehrcore.models.clinical import MedicationStatement, MedicationStatementStatus
from ehrcore.models.clinical_safety import Flag, FlagStatus
from ehrcore.models.financial import ChargeItem, PaymentReconciliation
from ehrcore.models.identity import Medication
from ehrcore.models.oncology import CancerDiagnosis, CancerStatus
from ehrcore.repositories.clinical import MedicationStatementRepository
from ehrcore.repositories.clinical_safety import FlagRepository
from ehrcore.repositories.financial import ChargeItemRepository, PaymentReconciliationRepository
from ehrcore.repositories.identity import MedicationRepository
from ehrcore.repositories.oncology import CancerDiagnosisRepository
from tests.conftest import create_patient


class TestFinancial:
    """Tests for billing resources."""

    def test_charge_item_search_by_patient_and_code(self, db):
        patient = create_patient(db)
        other = create_patient(db)
        repo = ChargeItemRepository(db)
        repo.create(ChargeItem(code_code="99213", code_system="http://www.ama-assn.org/go/cpt", subject_patient_id=patient.id))
        repo.create(ChargeItem(code_code="99214", subject_patient_id=patient.id))
        repo.create(ChargeItem(code_code="99213", subject_patient_id=other.id))

        results, total = repo.search({"patient": f"Patient/{patient.id}", "code": "99213"})
        assert total == 1
        assert results[0].subject_patient_id == patient.id

        _, total = repo.search({"code": "http://www.ama-assn.org/go/cpt|99213"})
        assert total == 1

    def test_reconciliation_amount_and_payment_date(self, db):
        repo = PaymentReconciliationRepository(db)
        repo.create(PaymentReconciliation(payment_date=date(2024, 1, 10), payment_amount=Decimal("100.00")))
        repo.create(PaymentReconciliation(payment_date=date(2024, 2, 10), payment_amount=Decimal("250.50")))

        _, total = repo.search({"amount": "gt200"})
        assert total == 1
        results, total = repo.search({"payment-date": "2024-01"})
        assert total == 1
        assert results[0].payment_amount == Decimal("100.00")

    def test_currency_defaults(self, db):
        created = PaymentReconciliationRepository(db).create(
            PaymentReconciliation(payment_date=date(2024, 1, 10), payment_amount=Decimal("1.00"))
        )
        assert PaymentReconciliationRepository(db).get_by_id(created.id).payment_currency == "USD"


class TestClinicalSafety:
    """Tests for flags."""

    def test_flag_status_filter(self, db):
        patient = create_patient(db)
        repo = FlagRepository(db)
        repo.create(Flag(code_code="fall-risk", subject_patient_id=patient.id))
        repo.create(Flag(code_code="isolation", subject_patient_id=patient.id, status=FlagStatus.INACTIVE))

        results, total = repo.search({"patient": str(patient.id), "status": "active"})
        assert total == 1
        assert results[0].code_code == "fall-risk"
        assert results[0].status == FlagStatus.ACTIVE


class TestMedicationStatement:
    """Tests for medication statements."""

    def test_medication_reference_and_effective_date(self, db):
        patient = create_patient(db)
        medication = MedicationRepository(db).create(Medication(code_value="197361", code_display="Amlodipine 5 MG"))
        repo = MedicationStatementRepository(db)
        repo.create(
            MedicationStatement(
                patient_id=patient.id,
                medication_id=medication.id,
                effective_datetime=datetime(2024, 5, 1, 9, tzinfo=timezone.utc),
            )
        )
        repo.create(
            MedicationStatement(
                patient_id=patient.id,
                medication_code="1049630",
                status=MedicationStatementStatus.STOPPED,
                effective_datetime=datetime(2023, 5, 1, 9, tzinfo=timezone.utc),
            )
        )

        results, total = repo.search({"medication": f"Medication/{medication.id}"})
        assert total == 1
        assert results[0].status == MedicationStatementStatus.ACTIVE

        _, total = repo.search({"effective": "ge2024-01-01"})
        assert total == 1
        _, total = repo.search({"code": "1049630", "status": "stopped"})
        assert total == 1


class TestCancerDiagnosisByPatient:
    """Tests for CancerDiagnosisRepository.list_by_patient."""

    def test_lists_only_that_patient(self, db):
        patient = create_patient(db)
        other = create_patient(db)
        repo = CancerDiagnosisRepository(db)
        for site in ("breast", "lung"):
            repo.create(
                CancerDiagnosis(patient_id=patient.id, cancer_site=site, diagnosis_date=datetime(2024, 1, 1, tzinfo=timezone.utc))
            )
        repo.create(CancerDiagnosis(patient_id=other.id, diagnosis_date=datetime(2024, 1, 1, tzinfo=timezone.utc)))

        results, total = repo.list_by_patient(patient.id, limit=1)
        assert total == 2
        assert len(results) == 1
        assert results[0].current_status == CancerStatus.ACTIVE_TREATMENT

    def test_invalid_patient_id_is_empty(self, db):
        assert CancerDiagnosisRepository(db).list_by_patient("not-a-uuid") == ([], 0)
