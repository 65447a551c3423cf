# ehrcore/repositories/oncology.py
import uuid

from ehrcore.models.oncology import (
    CancerDiagnosis,
    ChemoAdministration,
    ChemoCycle,
    RadiationSession,
    RadiationTherapy,
    TreatmentProtocol,
    TreatmentProtocolDrug,
    TumorBoardReview,
    TumorMarker,
)
from ehrcore.repositories.base import ResourceRepository, coerce_uuid
from ehrcore.repositories.search import date_param, number, reference, string, token


class CancerDiagnosisRepository(ResourceRepository[CancerDiagnosis]):
    model = CancerDiagnosis
    search_params = {
        "patient": reference("patient_id"),
        "status": token("current_status"),
        "cancer-type": token("cancer_type"),
        "site": string("cancer_site"),
        "stage": token("stage_group"),
        "icd10": token("icd10_code"),
        "diagnosis-date": date_param("diagnosis_date"),
    }

    def list_by_patient(
        self, patient_id: uuid.UUID | str, limit: int = 0, offset: int = 0
    ) -> tuple[list[CancerDiagnosis], int]:
        patient_uuid = coerce_uuid(patient_id)
        if patient_uuid is None:
            return [], 0
        return self._page([CancerDiagnosis.patient_id == patient_uuid], limit, offset)


class TreatmentProtocolRepository(ResourceRepository[TreatmentProtocol]):
    model = TreatmentProtocol
    search_params = {
        "diagnosis": reference("cancer_diagnosis_id"),
        "status": token("status"),
        "name": string("protocol_name"),
        "code": token("protocol_code"),
        "intent": token("intent"),
    }

    def add_drug(self, drug: TreatmentProtocolDrug) -> TreatmentProtocolDrug:
        return self._add_child(TreatmentProtocolDrug, drug)

    def get_drugs(self, protocol_id: uuid.UUID | str) -> list[TreatmentProtocolDrug]:
        """Ordered by sequence_order (unset last), then insertion order."""
        return self._get_children(TreatmentProtocolDrug, protocol_id)


class ChemoCycleRepository(ResourceRepository[ChemoCycle]):
    model = ChemoCycle
    search_params = {
        "protocol": reference("protocol_id"),
        "status": token("status"),
        "cycle-number": number("cycle_number"),
        "start-date": date_param("actual_start_date"),
    }

    def add_administration(self, administration: ChemoAdministration) -> ChemoAdministration:
        return self._add_child(ChemoAdministration, administration)

    def get_administrations(self, cycle_id: uuid.UUID | str) -> list[ChemoAdministration]:
        return self._get_children(ChemoAdministration, cycle_id)


class RadiationTherapyRepository(ResourceRepository[RadiationTherapy]):
    model = RadiationTherapy
    search_params = {
        "diagnosis": reference("cancer_diagnosis_id"),
        "status": token("status"),
        "modality": token("modality"),
        "target-site": string("target_site"),
    }

    def add_session(self, session: RadiationSession) -> RadiationSession:
        return self._add_child(RadiationSession, session)

    def get_sessions(self, radiation_therapy_id: uuid.UUID | str) -> list[RadiationSession]:
        return self._get_children(RadiationSession, radiation_therapy_id)


class TumorMarkerRepository(ResourceRepository[TumorMarker]):
    model = TumorMarker
    search_params = {
        "patient": reference("patient_id"),
        "diagnosis": reference("cancer_diagnosis_id"),
        "name": string("marker_name"),
        "code": token("marker_code", system_column="marker_code_system"),
        "value": number("value_quantity"),
        "date": date_param("collection_datetime"),
    }


class TumorBoardReviewRepository(ResourceRepository[TumorBoardReview]):
    model = TumorBoardReview
    search_params = {
        "patient": reference("patient_id"),
        "diagnosis": reference("cancer_diagnosis_id"),
        "date": date_param("review_date"),
        "type": token("review_type"),
    }
