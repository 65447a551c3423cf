# ehrcore/repositories/clinical.py
import uuid

from ehrcore.models.clinical import (
    AllergyIntolerance,
    AllergyReaction,
    Condition,
    MedicationStatement,
    Observation,
    ObservationComponent,
)
from ehrcore.repositories.base import ResourceRepository
from ehrcore.repositories.search import date_param, number, reference, token


class ConditionRepository(ResourceRepository[Condition]):
    model = Condition
    search_params = {
        "patient": reference("patient_id"),
        "clinical-status": token("clinical_status"),
        "verification-status": token("verification_status"),
        "category": token("category_code"),
        "code": token("code_value", system_column="code_system"),
        "onset-date": date_param("onset_datetime"),
        "encounter": reference("encounter_id"),
    }


class ObservationRepository(ResourceRepository[Observation]):
    model = Observation
    search_params = {
        "patient": reference("patient_id"),
        "category": token("category_code"),
        "code": token("code_value", system_column="code_system"),
        "status": token("status"),
        "date": date_param("effective_datetime"),
        "encounter": reference("encounter_id"),
        "value-quantity": number("value_quantity"),
    }

    def add_component(self, component: ObservationComponent) -> ObservationComponent:
        return self._add_child(ObservationComponent, component)

    def get_components(self, observation_id: uuid.UUID | str) -> list[ObservationComponent]:
        return self._get_children(ObservationComponent, observation_id)


class AllergyIntoleranceRepository(ResourceRepository[AllergyIntolerance]):
    model = AllergyIntolerance
    search_params = {
        "patient": reference("patient_id"),
        "clinical-status": token("clinical_status"),
        "criticality": token("criticality"),
        "code": token("code_value", system_column="code_system"),
        "category": token("category"),
    }

    def add_reaction(self, reaction: AllergyReaction) -> AllergyReaction:
        return self._add_child(AllergyReaction, reaction)

    def get_reactions(self, allergy_id: uuid.UUID | str) -> list[AllergyReaction]:
        return self._get_children(AllergyReaction, allergy_id)


class MedicationStatementRepository(ResourceRepository[MedicationStatement]):
    model = MedicationStatement
    search_params = {
        "patient": reference("patient_id"),
        "status": token("status"),
        "code": token("medication_code"),
        "medication": reference("medication_id"),
        "effective": date_param("effective_datetime"),
        "category": token("category_code"),
    }
