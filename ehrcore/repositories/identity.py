# ehrcore/repositories/identity.py
from ehrcore.models.identity import Coverage, Encounter, Location, Medication, Organization, Patient, Practitioner
from ehrcore.repositories.base import ResourceRepository
from ehrcore.repositories.search import boolean, date_param, reference, string, token


class OrganizationRepository(ResourceRepository[Organization]):
    model = Organization
    search_params = {
        "name": string("name"),
        "type": token("type_code"),
        "active": boolean("active"),
        "partof": reference("parent_organization_id"),
    }


class PractitionerRepository(ResourceRepository[Practitioner]):
    model = Practitioner
    search_params = {
        "family": string("last_name"),
        "given": string("first_name"),
        "identifier": token("npi_number"),
        "gender": token("gender"),
        "active": boolean("active"),
    }


class PatientRepository(ResourceRepository[Patient]):
    model = Patient
    search_params = {
        "identifier": token("mrn"),
        "family": string("last_name"),
        "given": string("first_name"),
        "birthdate": date_param("birth_date"),
        "gender": token("gender"),
        "active": boolean("active"),
        "organization": reference("managing_organization_id"),
        "general-practitioner": reference("primary_care_practitioner_id"),
    }


class LocationRepository(ResourceRepository[Location]):
    model = Location
    search_params = {
        "name": string("name"),
        "status": token("status"),
        "type": token("type_code"),
        "organization": reference("organization_id"),
    }


class EncounterRepository(ResourceRepository[Encounter]):
    model = Encounter
    search_params = {
        "patient": reference("patient_id"),
        "status": token("status"),
        "class": token("class_code"),
        "type": token("type_code"),
        "date": date_param("period_start"),
        "practitioner": reference("practitioner_id"),
        "location": reference("location_id"),
        "service-provider": reference("service_provider_id"),
    }


class MedicationRepository(ResourceRepository[Medication]):
    model = Medication
    search_params = {
        "code": token("code_value", system_column="code_system"),
        "status": token("status"),
        "form": token("form_code"),
        "manufacturer": reference("manufacturer_id"),
    }


class CoverageRepository(ResourceRepository[Coverage]):
    model = Coverage
    search_params = {
        "beneficiary": reference("beneficiary_patient_id"),
        "patient": reference("beneficiary_patient_id"),
        "status": token("status"),
        "type": token("type_code"),
        "payor": reference("payor_org_id"),
        "subscriber-id": token("subscriber_id"),
    }
