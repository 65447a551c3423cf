# ehrcore/models/tenant_domain.py
from ehrcore.models.clinical import (
    AllergyIntolerance,
    AllergyReaction,
    Condition,
    MedicationStatement,
    Observation,
    ObservationComponent,
)
from ehrcore.models.clinical_safety import AdverseEvent, ClinicalImpression, DetectedIssue, Flag, RiskAssessment
from ehrcore.models.conformance import (
    MessageDefinition,
    MessageHeader,
    NamingSystem,
    NamingSystemUniqueId,
    OperationDefinition,
    OperationDefinitionParameter,
)
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
from ehrcore.models.identity import Coverage, Encounter, Location, Medication, Organization, Patient, Practitioner
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
from ehrcore.models.terminology import CptCode, Icd10Code, LoincCode, RxNormCode, SnomedCode

# Order matters: tables with no dependencies first, then tables that depend on them
# Foreign key dependencies:
# - Patient depends on Organization and Practitioner
# - Encounter depends on Patient, Practitioner, Location
# - Clinical, safety and financial resources depend on Patient/Encounter/Practitioner
# - RiskAssessment and CancerDiagnosis depend on Condition
# - ChargeItem depends on Account, EnrollmentRequest on Coverage
# - ChemoAdministration depends on ChemoCycle AND TreatmentProtocolDrug
# - Child tables come right after their parent
TENANT_TABLES = [
    # Tables with no tenant dependencies (create first)
    Organization.__table__,
    Practitioner.__table__,
    LoincCode.__table__,
    Icd10Code.__table__,
    SnomedCode.__table__,
    RxNormCode.__table__,
    CptCode.__table__,
    NamingSystem.__table__,
    NamingSystemUniqueId.__table__,
    OperationDefinition.__table__,
    OperationDefinitionParameter.__table__,
    MessageDefinition.__table__,
    MessageHeader.__table__,
    InsurancePlan.__table__,
    PaymentReconciliation.__table__,
    # Tables that depend on Organization/Practitioner only
    Patient.__table__,
    Location.__table__,
    Medication.__table__,
    PaymentNotice.__table__,
    # Tables that depend on Patient
    Encounter.__table__,
    Coverage.__table__,
    Account.__table__,
    Contract.__table__,
    # Tables that depend on Patient AND Encounter
    Condition.__table__,
    Observation.__table__,
    ObservationComponent.__table__,
    AllergyIntolerance.__table__,
    AllergyReaction.__table__,
    MedicationStatement.__table__,
    Flag.__table__,
    DetectedIssue.__table__,
    AdverseEvent.__table__,
    ClinicalImpression.__table__,
    RiskAssessment.__table__,  # Must come after Condition
    ChargeItem.__table__,  # Must come after Account
    EnrollmentRequest.__table__,  # Must come after Coverage
    EnrollmentResponse.__table__,
    # Oncology (CancerDiagnosis depends on Condition)
    CancerDiagnosis.__table__,
    TreatmentProtocol.__table__,
    TreatmentProtocolDrug.__table__,
    ChemoCycle.__table__,
    ChemoAdministration.__table__,  # Depends on ChemoCycle AND TreatmentProtocolDrug
    RadiationTherapy.__table__,
    RadiationSession.__table__,
    TumorMarker.__table__,
    TumorBoardReview.__table__,
]
