# ehrcore/repositories/clinical_safety.py
from ehrcore.models.clinical_safety import AdverseEvent, ClinicalImpression, DetectedIssue, Flag, RiskAssessment
from ehrcore.repositories.base import ResourceRepository
from ehrcore.repositories.search import date_param, number, reference, token


class FlagRepository(ResourceRepository[Flag]):
    model = Flag
    search_params = {
        "patient": reference("subject_patient_id"),
        "status": token("status"),
        "code": token("code_code", system_column="code_system"),
        "category": token("category_code"),
        "encounter": reference("encounter_id"),
        "date": date_param("period_start"),
    }


class DetectedIssueRepository(ResourceRepository[DetectedIssue]):
    model = DetectedIssue
    search_params = {
        "patient": reference("patient_id"),
        "status": token("status"),
        "code": token("code_code", system_column="code_system"),
        "severity": token("severity"),
        "identified": date_param("identified_date"),
        "author": reference("author_practitioner_id"),
    }


class AdverseEventRepository(ResourceRepository[AdverseEvent]):
    model = AdverseEvent
    search_params = {
        "patient": reference("subject_patient_id"),
        "actuality": token("actuality"),
        "category": token("category_code"),
        "event": token("event_code", system_column="event_system"),
        "seriousness": token("seriousness_code"),
        "date": date_param("date"),
    }


class ClinicalImpressionRepository(ResourceRepository[ClinicalImpression]):
    model = ClinicalImpression
    search_params = {
        "patient": reference("subject_patient_id"),
        "status": token("status"),
        "encounter": reference("encounter_id"),
        "assessor": reference("assessor_id"),
        "date": date_param("date"),
    }


class RiskAssessmentRepository(ResourceRepository[RiskAssessment]):
    model = RiskAssessment
    search_params = {
        "patient": reference("subject_patient_id"),
        "status": token("status"),
        "method": token("method_code"),
        "condition": reference("condition_id"),
        "probability": number("prediction_probability"),
        "date": date_param("occurrence_date"),
    }
