# app/services/visa_catalogs.py
"""
Catálogos de slots de evidencia por tipo de visa.
Define, para cada visa, todos los slots posibles del checklist del caso.

Los catálogos se construyen y validan una sola vez (ids únicos, dependencias
sin ciclos) y son inmutables.
"""
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from app.domain.catalog import Catalog, EvidenceCategory
from app.domain.errors import UnknownVisaTypeError
from app.domain.form_values import to_form_value
from app.domain.slot import (
    AcceptableDocumentType,
    DependencyCondition,
    FormCondition,
    SlotDependency,
    SlotPriority,
    SlotTemplate,
)
from app.logger import get_logger

logger = get_logger(__name__)

REQUIRED = SlotPriority.REQUIRED
OPTIONAL = SlotPriority.OPTIONAL
CONDITIONAL = SlotPriority.CONDITIONAL


EVIDENCE_CATEGORIES: Dict[str, EvidenceCategory] = {
    c.id: c
    for c in [
        EvidenceCategory("identity_personal", "Identity & Personal Status", "Personal information and identity verification", 1),
        EvidenceCategory("financial", "Financial Information", "Income, savings, and financial evidence", 2),
        EvidenceCategory("employment", "Employment & Income", "Employment history and income verification", 3),
        EvidenceCategory("english_language", "English Language", "English language proficiency evidence", 4),
        EvidenceCategory("knowledge_life_uk", "Knowledge of Life in UK", "Life in the UK test certificate", 5),
        EvidenceCategory("residence", "Accommodation", "Where you will live in the UK", 6),
        EvidenceCategory("immigration_history", "Immigration & Travel", "Previous visas, travel history, and immigration status", 7),
        EvidenceCategory("character_conduct", "Character & Conduct", "Criminal history and character assessment", 8),
        EvidenceCategory("relationship", "Relationship & Family", "Relationship status and family information", 9),
        EvidenceCategory("sponsor", "Sponsor Information", "Details about your UK-based sponsor", 10),
        EvidenceCategory("translations", "Translations", "Certified translations of foreign documents", 11),
        EvidenceCategory("other", "Additional Information", "Other supporting information", 99),
    ]
}


def _doc(type_id: str, label: str, *requirements: str, preferred: bool = False, note: Optional[str] = None) -> AcceptableDocumentType:
    return AcceptableDocumentType(
        type_id=type_id,
        label=label,
        requirements=tuple(requirements),
        is_preferred=preferred,
        conditional_note=note,
    )


def _when(question_id: str, value, operator: str = "equals") -> FormCondition:
    wrapped = to_form_value(value)
    if wrapped is None:
        raise ValueError(f"Unsupported condition value for question {question_id}: {value!r}")
    return FormCondition(question_id=question_id, operator=operator, value=wrapped)


# =========================================
# NATURALISATION
# =========================================

NATURALISATION_SLOTS: Tuple[SlotTemplate, ...] = (
    # --- Identity & Personal Status ---
    SlotTemplate(
        id="identity",
        name="Identity Documents",
        category_id="identity_personal",
        description="Valid passport and photo identification",
        priority=REQUIRED,
        min_count=1,
        max_count=2,
        acceptable_types=(
            _doc("passport", "Current Passport", "Clear scan of bio page", "All visa pages with stamps", preferred=True),
            _doc("national_id", "National ID Card", "Front and back scan", "Must be valid (not expired)"),
        ),
    ),
    SlotTemplate(
        id="birth_certificate",
        name="Birth Certificate",
        category_id="identity_personal",
        priority=REQUIRED,
        acceptable_types=(
            _doc("birth_cert_original", "Birth Certificate", "Original or certified copy", "Shows parents' names", preferred=True),
        ),
    ),
    # --- Residence ---
    SlotTemplate(
        id="address_proof",
        name="Proof of Address",
        category_id="residence",
        priority=REQUIRED,
        max_count=3,
        acceptable_types=(
            _doc("bank_statement", "Bank Statement", "Dated within last 3 months", preferred=True),
            _doc("utility_bill", "Utility Bill", "Dated within last 3 months", "Not a mobile phone bill"),
            _doc("council_tax", "Council Tax Bill", "Current financial year"),
            _doc("tenancy_agreement", "Tenancy Agreement", "Signed by landlord and tenant"),
        ),
    ),
    # --- Financial ---
    SlotTemplate(
        id="financial_evidence",
        name="Bank Statements (6 months)",
        category_id="financial",
        description="6 consecutive months of bank statements",
        priority=REQUIRED,
        min_count=6,
        max_count=12,
        acceptable_types=(
            _doc("bank_statement_monthly", "Monthly Bank Statement", "Consecutive months required", preferred=True),
            _doc("savings_statement", "Savings Account Statement", "Official bank document"),
        ),
    ),
    SlotTemplate(
        id="overseas_assets",
        name="Overseas Asset Documentation",
        category_id="financial",
        priority=CONDITIONAL,
        max_count=5,
        form_condition=_when("has_overseas_assets", True),
        acceptable_types=(
            _doc("property_deed", "Property Deed/Title", "Shows property ownership"),
            _doc("investment_statement", "Investment Statement", "Shows current value"),
        ),
    ),
    # --- Employment ---
    SlotTemplate(
        id="employment_proof",
        name="Employment Evidence",
        category_id="employment",
        priority=REQUIRED,
        max_count=3,
        acceptable_types=(
            _doc("employment_letter", "Employment Letter", "On company letterhead", "Dated within last 3 months", preferred=True),
            _doc("payslips", "Recent Payslips", "Consecutive months"),
            _doc("contract", "Employment Contract", "Signed by both parties"),
        ),
    ),
    SlotTemplate(
        id="employer_reference",
        name="Employer Reference Letter",
        category_id="employment",
        priority=CONDITIONAL,
        depends_on=SlotDependency("employment_proof", DependencyCondition.SATISFIED),
        acceptable_types=(
            _doc("reference_letter", "Reference Letter", "Signed by senior manager"),
        ),
    ),
    SlotTemplate(
        id="business_documents",
        name="Self-Employment Evidence",
        category_id="employment",
        priority=CONDITIONAL,
        max_count=5,
        form_condition=_when("is_self_employed", True),
        acceptable_types=(
            _doc("company_registration", "Company Registration Certificate", "Currently active status", preferred=True),
            _doc("self_assessment", "Self Assessment Tax Return", "Last 2-3 years"),
            _doc("accountant_letter", "Accountant's Letter", "Signed and dated"),
        ),
    ),
    # --- English / Life in the UK ---
    SlotTemplate(
        id="english_proof",
        name="English Language Proof",
        category_id="english_language",
        priority=REQUIRED,
        acceptable_types=(
            _doc("ielts", "IELTS Certificate", "Within last 2 years", preferred=True),
            _doc("degree_uk", "UK Degree Certificate", "From recognized UK institution"),
        ),
    ),
    SlotTemplate(
        id="life_in_uk_test",
        name="Life in the UK Test",
        category_id="knowledge_life_uk",
        priority=REQUIRED,
        acceptable_types=(
            _doc("life_in_uk", "Life in the UK Test Pass", "Test reference number visible", preferred=True),
        ),
    ),
    # --- Immigration history ---
    SlotTemplate(
        id="travel_history",
        name="Travel History",
        category_id="immigration_history",
        priority=OPTIONAL,
        min_count=0,
        max_count=10,
        acceptable_types=(
            _doc("old_passport", "Previous Passports", "All pages with entry/exit stamps"),
            _doc("travel_tickets", "Flight Tickets/Boarding Passes", "Shows dates and destinations"),
        ),
    ),
    SlotTemplate(
        id="previous_visas",
        name="Previous Visas & BRPs",
        category_id="immigration_history",
        priority=REQUIRED,
        max_count=10,
        acceptable_types=(
            _doc("brp", "Biometric Residence Permit", "Front and back scan", preferred=True),
            _doc("visa_vignette", "Visa Vignette", "Clear scan of visa page"),
        ),
    ),
    # --- Character & Conduct ---
    SlotTemplate(
        id="character_references",
        name="Character References",
        category_id="character_conduct",
        priority=REQUIRED,
        min_count=2,
        max_count=4,
        acceptable_types=(
            _doc("character_reference", "Character Reference Letter", "From UK resident", "Signed and dated", preferred=True),
        ),
    ),
    SlotTemplate(
        id="criminal_record",
        name="Criminal Record Check",
        category_id="character_conduct",
        priority=CONDITIONAL,
        max_count=3,
        form_condition=_when("lived_abroad_12_months", True),
        acceptable_types=(
            _doc("police_certificate", "Police Certificate", "Within last 6 months", preferred=True),
        ),
    ),
    # --- Relationship ---
    SlotTemplate(
        id="child_documents",
        name="Child Birth Certificates",
        category_id="relationship",
        priority=CONDITIONAL,
        max_count=10,
        form_condition=_when("has_children", True),
        acceptable_types=(
            _doc("birth_certificate", "Birth Certificate", "Shows both parents' names", preferred=True),
            _doc("adoption_certificate", "Adoption Certificate", "Court-issued adoption order"),
        ),
    ),
    SlotTemplate(
        id="marriage_certificate",
        name="Marriage Certificate",
        category_id="relationship",
        priority=CONDITIONAL,
        form_condition=_when("marital_status", "married"),
        acceptable_types=(
            _doc("marriage_cert", "Marriage Certificate", "Original or certified copy", preferred=True),
        ),
    ),
)


# =========================================
# SKILLED WORKER
# =========================================

SKILLED_WORKER_SLOTS: Tuple[SlotTemplate, ...] = (
    SlotTemplate(
        id="identity",
        name="Identity Documents",
        category_id="identity_personal",
        priority=REQUIRED,
        acceptable_types=(
            _doc("passport", "Current Passport", "At least 6 months validity", preferred=True),
        ),
    ),
    SlotTemplate(
        id="cos",
        name="Certificate of Sponsorship",
        category_id="sponsor",
        priority=REQUIRED,
        acceptable_types=(
            _doc("cos_reference", "CoS Reference Number", "Issued by licensed sponsor", preferred=True),
        ),
    ),
    SlotTemplate(
        id="qualifications",
        name="Qualifications",
        category_id="employment",
        priority=CONDITIONAL,
        max_count=5,
        acceptable_types=(
            _doc("degree", "Degree Certificate", "Original or certified copy", preferred=True),
            _doc("transcript", "Academic Transcript", "From issuing institution"),
            _doc("professional_cert", "Professional Certification", "Currently valid", note="If required for your profession"),
        ),
    ),
    SlotTemplate(
        id="english_proof",
        name="English Language Proof",
        category_id="english_language",
        priority=REQUIRED,
        acceptable_types=(
            _doc("ielts_selt", "IELTS for UKVI", "Minimum B1 level", preferred=True),
            _doc("degree_english", "Degree Taught in English", "Or NARIC confirmation"),
        ),
    ),
    SlotTemplate(
        id="financial_proof",
        name="Financial Requirement",
        category_id="financial",
        priority=REQUIRED,
        max_count=3,
        acceptable_types=(
            _doc("bank_statement_28days", "Bank Statement (28 days)", "Funds held for 28 days", preferred=True),
            _doc("sponsor_letter", "Sponsor Certification", "A-rated sponsor only", note="Only if sponsor is A-rated"),
        ),
    ),
)


# =========================================
# PARTNER
# =========================================

PARTNER_SLOTS: Tuple[SlotTemplate, ...] = (
    SlotTemplate(
        id="personal_details",
        name="Personal Details",
        category_id="identity_personal",
        priority=REQUIRED,
        max_count=3,
        acceptable_types=(
            _doc("passport", "Current Passport", "Bio data page clearly visible", preferred=True),
            _doc("national_id", "National ID Card", "Currently valid"),
            _doc("birth_certificate", "Birth Certificate", "Translated if not in English"),
        ),
    ),
    SlotTemplate(
        id="relationship_details",
        name="Relationship Details",
        category_id="relationship",
        priority=REQUIRED,
        max_count=5,
        acceptable_types=(
            _doc("marriage_certificate", "Marriage Certificate", preferred=True),
            _doc("relationship_photos", "Relationship Photos"),
            _doc("communication_evidence", "Communication Evidence"),
        ),
    ),
    SlotTemplate(
        id="family_information",
        name="Family Information",
        category_id="relationship",
        priority=CONDITIONAL,
        max_count=10,
        form_condition=_when("has_dependants", True),
        acceptable_types=(
            _doc("child_birth_certificate", "Child Birth Certificate", preferred=True),
            _doc("custody_documents", "Custody Documents"),
        ),
    ),
    SlotTemplate(
        id="sponsor_information",
        name="Sponsor Information",
        category_id="sponsor",
        priority=REQUIRED,
        max_count=3,
        acceptable_types=(
            _doc("sponsor_passport", "Sponsor Passport/ID", preferred=True),
            _doc("sponsor_brp", "Sponsor BRP"),
        ),
    ),
    SlotTemplate(
        id="financial_information",
        name="Financial Information",
        category_id="financial",
        priority=REQUIRED,
        min_count=6,
        max_count=12,
        acceptable_types=(
            _doc("bank_statements", "Bank Statements", preferred=True),
            _doc("payslips", "Payslips"),
            _doc("employment_letter", "Employment Letter"),
            _doc("tax_returns", "Tax Returns"),
        ),
    ),
    SlotTemplate(
        id="accommodation",
        name="Accommodation",
        category_id="residence",
        priority=REQUIRED,
        max_count=3,
        acceptable_types=(
            _doc("tenancy_agreement", "Tenancy Agreement", preferred=True),
            _doc("property_deed", "Property Ownership"),
            _doc("accommodation_letter", "Accommodation Letter"),
        ),
    ),
    SlotTemplate(
        id="english_language",
        name="English Language",
        category_id="english_language",
        priority=REQUIRED,
        max_count=2,
        acceptable_types=(
            _doc("ielts_certificate", "IELTS Life Skills", preferred=True),
            _doc("english_degree", "Degree Taught in English"),
        ),
    ),
    SlotTemplate(
        id="immigration_status",
        name="Immigration Status",
        category_id="immigration_history",
        priority=REQUIRED,
        min_count=0,
        max_count=5,
        acceptable_types=(
            _doc("previous_visas", "Previous Visas"),
            _doc("refusal_letters", "Refusal Letters"),
        ),
    ),
    SlotTemplate(
        id="character_conduct",
        name="Character & Conduct",
        category_id="character_conduct",
        priority=REQUIRED,
        min_count=0,
        max_count=5,
        acceptable_types=(
            _doc("police_certificate", "Police Certificate"),
            _doc("court_documents", "Court Documents"),
        ),
    ),
    SlotTemplate(
        id="medical_information",
        name="Medical & Health",
        category_id="identity_personal",
        priority=REQUIRED,
        max_count=3,
        acceptable_types=(
            _doc("tb_certificate", "TB Test Certificate", preferred=True),
            _doc("nhs_registration", "NHS Registration"),
        ),
    ),
)


VISA_TEMPLATES: Dict[str, Tuple[SlotTemplate, ...]] = {
    "naturalisation": NATURALISATION_SLOTS,
    "skilled_worker": SKILLED_WORKER_SLOTS,
    "visitor": (),
    "partner": PARTNER_SLOTS,
}


@lru_cache(maxsize=None)
def _load_catalog(visa_type: str) -> Catalog:
    """Construye y valida el catálogo base (ids de plantilla) una sola vez por visa."""
    catalog = Catalog(visa_type=visa_type, templates=VISA_TEMPLATES.get(visa_type, ()))
    logger.info("Loaded catalog '%s' with %d slots", visa_type, len(catalog))
    return catalog


def is_known_visa_type(visa_type: str) -> bool:
    return visa_type in VISA_TEMPLATES


def get_catalog(visa_type: str) -> Catalog:
    """
    Catálogo base de un tipo de visa.

    Raises:
        UnknownVisaTypeError: si el tipo de visa no está configurado.
    """
    if not is_known_visa_type(visa_type):
        raise UnknownVisaTypeError(visa_type)
    return _load_catalog(visa_type)


def catalog_for(visa_type: str, case_id: str) -> Catalog:
    """Catálogo con ids de caso. Un tipo de visa desconocido produce un catálogo vacío."""
    if not is_known_visa_type(visa_type):
        logger.warning("Unknown visa type '%s', using empty catalog", visa_type)
        return Catalog(visa_type=visa_type, templates=())
    return _load_catalog(visa_type).for_case(case_id)


def templates_for(visa_type: str, case_id: str) -> List[SlotTemplate]:
    return list(catalog_for(visa_type, case_id).templates)


def categories_for(visa_type: str) -> List[EvidenceCategory]:
    """Categorías presentes en el catálogo de la visa, en orden de presentación."""
    category_ids = {t.category_id for t in VISA_TEMPLATES.get(visa_type, ())}
    categories = [EVIDENCE_CATEGORIES[c] for c in category_ids if c in EVIDENCE_CATEGORIES]
    return sorted(categories, key=lambda c: c.order)


def acceptable_types_for(visa_type: str) -> List[Tuple[str, str, AcceptableDocumentType]]:
    """Lista plana (slot_id, slot_name, tipo) de todos los tipos aceptados por la visa."""
    return [
        (template.id, template.name, doc_type)
        for template in VISA_TEMPLATES.get(visa_type, ())
        for doc_type in template.acceptable_types
    ]


def load_all_catalogs() -> Dict[str, Catalog]:
    """Fuerza la carga (y validación) de todos los catálogos configurados."""
    return {visa_type: _load_catalog(visa_type) for visa_type in VISA_TEMPLATES}
