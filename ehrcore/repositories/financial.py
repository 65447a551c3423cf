# ehrcore/repositories/financial.py
from ehrcore.models.financial import (
    Account,
    ChargeItem,
    Contract,
    EnrollmentRequest,
    EnrollmentResponse,
    InsurancePlan,
    PaymentNotice,
    PaymentReconciliation,
)
from ehrcore.repositories.base import ResourceRepository
from ehrcore.repositories.search import date_param, number, reference, string, token


class AccountRepository(ResourceRepository[Account]):
    model = Account
    search_params = {
        "status": token("status"),
        "name": string("name"),
        "patient": reference("subject_patient_id"),
        "subject": reference("subject_patient_id"),
        "owner": reference("owner_org_id"),
        "type": token("type_code"),
    }


class InsurancePlanRepository(ResourceRepository[InsurancePlan]):
    model = InsurancePlan
    search_params = {
        "status": token("status"),
        "name": string("name"),
        "type": token("type_code"),
        "owned-by": reference("owned_by_org_id"),
        "administered-by": reference("administered_by_org_id"),
    }


class PaymentNoticeRepository(ResourceRepository[PaymentNotice]):
    model = PaymentNotice
    search_params = {
        "status": token("status"),
        "created": date_param("created"),
        "payment-status": token("payment_status_code"),
        "provider": reference("provider_id"),
        "amount": number("amount_value"),
    }


class PaymentReconciliationRepository(ResourceRepository[PaymentReconciliation]):
    model = PaymentReconciliation
    search_params = {
        "status": token("status"),
        "outcome": token("outcome"),
        "created": date_param("created"),
        "payment-date": date_param("payment_date"),
        "payment-issuer": reference("payment_issuer_org_id"),
        "amount": number("payment_amount"),
    }


class ChargeItemRepository(ResourceRepository[ChargeItem]):
    model = ChargeItem
    search_params = {
        "patient": reference("subject_patient_id"),
        "status": token("status"),
        "code": token("code_code", system_column="code_system"),
        "account": reference("account_id"),
        "occurrence": date_param("occurrence_date"),
        "quantity": number("quantity_value"),
    }


class ContractRepository(ResourceRepository[Contract]):
    model = Contract
    search_params = {
        "status": token("status"),
        "patient": reference("subject_patient_id"),
        "type": token("type_code"),
        "issued": date_param("issued"),
        "authority": reference("authority_org_id"),
    }


class EnrollmentRequestRepository(ResourceRepository[EnrollmentRequest]):
    model = EnrollmentRequest
    search_params = {
        "status": token("status"),
        "patient": reference("candidate_patient_id"),
        "subject": reference("candidate_patient_id"),
    }


class EnrollmentResponseRepository(ResourceRepository[EnrollmentResponse]):
    model = EnrollmentResponse
    search_params = {
        "status": token("status"),
        "request": reference("request_id"),
        "outcome": token("outcome"),
    }
