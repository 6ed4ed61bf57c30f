from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

FIELD_CATEGORIES = (
    "personal",
    "identification",
    "contact",
    "address",
    "passport",
    "travel",
    "education",
    "employment",
    "financial",
)
GENERAL_TEMPLATE_KEY = "general"


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    description: str
    category: str
    examples: Tuple[str, ...] = ()
    validation_rules: Tuple[str, ...] = ()
    required: bool = False


@dataclass(frozen=True)
class DocumentTemplate:
    name: str
    category: str
    description: str
    fields: Tuple[FieldDefinition, ...]
    examples: Tuple[str, ...] = field(default_factory=tuple)


def _field(
    name: str,
    description: str,
    category: str,
    examples: Sequence[str],
    required: bool = False,
    validation_rules: Sequence[str] = (),
) -> FieldDefinition:
    return FieldDefinition(
        name=name,
        description=description,
        category=category,
        examples=tuple(examples),
        validation_rules=tuple(validation_rules),
        required=required,
    )


PERSONAL_FIELDS: Tuple[FieldDefinition, ...] = (
    _field(
        "full_name",
        "Complete full name of the person",
        "personal",
        ["John Michael Smith", "Maria Garcia Rodriguez"],
        required=True,
        validation_rules=[
            "Should contain at least first and last name",
            "No special characters except spaces and hyphens",
        ],
    ),
    _field("first_name", "First/given name", "personal", ["John", "Maria", "Ahmed"], required=True),
    _field(
        "last_name",
        "Last/family name/surname",
        "personal",
        ["Smith", "Garcia Rodriguez", "Al-Mansouri"],
        required=True,
    ),
    _field(
        "date_of_birth",
        "Date of birth in any format",
        "personal",
        ["15/03/1985", "March 15, 1985", "1985-03-15"],
        required=True,
        validation_rules=["Should be a valid date", "Should be in the past"],
    ),
    _field(
        "nationality",
        "Nationality or citizenship",
        "personal",
        ["United States", "Canadian", "British", "Indian"],
        required=True,
    ),
    _field("gender", "Gender information", "personal", ["Male", "Female", "M", "F"]),
)

IDENTIFICATION_FIELDS: Tuple[FieldDefinition, ...] = (
    _field(
        "passport_number",
        "Passport number or identifier",
        "identification",
        ["A12345678", "123456789", "P1234567"],
        validation_rules=["Usually 6-9 alphanumeric characters"],
    ),
    _field(
        "visa_number",
        "Visa number or identifier",
        "identification",
        ["V123456789", "1234567890", "B1/B2-123456"],
    ),
    _field("visa_type", "Type of visa", "identification", ["Tourist", "Student", "Work", "B1/B2", "F-1"]),
    _field(
        "document_number",
        "Any other official document number",
        "identification",
        ["DL123456789", "SSN123-45-6789"],
    ),
)

PASSPORT_FIELDS: Tuple[FieldDefinition, ...] = (
    _field("place_of_birth", "City and country of birth", "passport", ["Toronto, Canada", "MUMBAI"]),
    _field(
        "issuing_country",
        "Country or authority that issued the passport",
        "passport",
        ["United States", "IND", "Federal Republic of Germany"],
    ),
    _field("date_of_issue", "Date the passport was issued", "passport", ["12 JAN 2019", "2019-01-12"]),
    _field(
        "date_of_expiration",
        "Date the passport expires",
        "passport",
        ["11 JAN 2029", "2029-01-11"],
    ),
)

CONTACT_FIELDS: Tuple[FieldDefinition, ...] = (
    _field(
        "email",
        "Email address",
        "contact",
        ["john.smith@email.com", "maria.garcia@company.org"],
        validation_rules=["Should be a valid email format"],
    ),
    _field(
        "phone",
        "Phone number in any format",
        "contact",
        ["+1-555-123-4567", "(555) 123-4567", "555-123-4567"],
    ),
)

ADDRESS_FIELDS: Tuple[FieldDefinition, ...] = (
    _field("address", "Complete address", "address", ["123 Main Street, Apt 4B", "456 Oak Avenue"]),
    _field("city", "City name", "address", ["New York", "Toronto", "London"]),
    _field("state_province", "State or province", "address", ["California", "Ontario", "England"]),
    _field("country", "Country name", "address", ["United States", "Canada", "United Kingdom"]),
    _field("postal_code", "Postal/ZIP code", "address", ["10001", "M5V 3A8", "SW1A 1AA"]),
)

TRAVEL_FIELDS: Tuple[FieldDefinition, ...] = (
    _field(
        "visa_issue_date",
        "Date the visa was issued",
        "travel",
        ["05/20/2022", "20 MAY 2022"],
    ),
    _field(
        "visa_expiration_date",
        "Date the visa expires",
        "travel",
        ["05/19/2032", "19 MAY 2032"],
    ),
    _field("number_of_entries", "Number of entries permitted", "travel", ["M", "Multiple", "1"]),
    _field(
        "purpose_of_trip",
        "Purpose of travel or visa class annotation",
        "travel",
        ["Business", "Tourism", "Study"],
    ),
    _field(
        "intended_arrival_date",
        "Planned date of arrival",
        "travel",
        ["08/01/2024", "August 1, 2024"],
    ),
    _field("length_of_stay", "Intended length of stay", "travel", ["2 weeks", "6 months"]),
)

EMPLOYMENT_FIELDS: Tuple[FieldDefinition, ...] = (
    _field(
        "employer_name",
        "Name of employer or company",
        "employment",
        ["Google Inc.", "Microsoft Corporation", "Self-employed"],
    ),
    _field("job_title", "Job title or position", "employment", ["Software Engineer", "Manager", "Consultant"]),
    _field("salary", "Salary or income information", "employment", ["$75,000", "CAD 85,000", "£45,000"]),
    _field("employment_start_date", "Employment start date", "employment", ["01/15/2020", "January 2020"]),
)

EDUCATION_FIELDS: Tuple[FieldDefinition, ...] = (
    _field(
        "institution_name",
        "Name of educational institution",
        "education",
        ["Harvard University", "University of Toronto", "MIT"],
    ),
    _field("degree", "Degree or qualification", "education", ["Bachelor of Science", "Master of Arts", "PhD"]),
    _field(
        "field_of_study",
        "Field or major of study",
        "education",
        ["Computer Science", "Business Administration", "Engineering"],
    ),
    _field("graduation_date", "Graduation date", "education", ["05/15/2018", "Spring 2018"]),
    _field("gpa", "Grade Point Average", "education", ["3.8", "4.0", "3.5/4.0"]),
)

FINANCIAL_FIELDS: Tuple[FieldDefinition, ...] = (
    _field(
        "bank_name",
        "Name of bank or financial institution",
        "financial",
        ["Chase Bank", "Bank of America", "Royal Bank of Canada"],
    ),
    _field("account_number", "Account number", "financial", ["1234567890", "****1234"]),
    _field("balance", "Account balance or financial amount", "financial", ["$25,000", "CAD 30,000"]),
)

BIRTH_RECORD_FIELDS: Tuple[FieldDefinition, ...] = (
    _field("place_of_birth", "City and country of birth", "personal", ["Lagos, Nigeria", "Manila"]),
    _field("father_full_name", "Full name of the father", "personal", ["Robert James Smith"]),
    _field("mother_full_name", "Full name of the mother", "personal", ["Anne Marie Smith"]),
    _field(
        "registration_number",
        "Civil registry or certificate number",
        "identification",
        ["1985-0042-1187", "BC 448812"],
    ),
)

MARRIAGE_RECORD_FIELDS: Tuple[FieldDefinition, ...] = (
    _field("spouse_full_name", "Full name of the spouse", "personal", ["Maria Elena Smith"]),
    _field("date_of_marriage", "Date of marriage", "personal", ["June 12, 2015", "12/06/2015"]),
    _field("place_of_marriage", "City and country where the marriage took place", "personal", ["Madrid, Spain"]),
    _field(
        "certificate_number",
        "Marriage certificate or registry number",
        "identification",
        ["MC-2015-00123", "48812"],
    ),
)


def _pick(fields: Iterable[FieldDefinition], *names: str) -> Tuple[FieldDefinition, ...]:
    return tuple(f for f in fields if f.name in names)


DOCUMENT_TEMPLATES: Dict[str, DocumentTemplate] = {
    "passport": DocumentTemplate(
        name="Passport",
        category="passport",
        description="International passport document",
        fields=(
            PERSONAL_FIELDS
            + _pick(IDENTIFICATION_FIELDS, "passport_number")
            + PASSPORT_FIELDS
            + ADDRESS_FIELDS
        ),
        examples=(
            'Look for sections labeled "Surname", "Given Names", "Date of Birth", "Nationality"',
            "Passport number is usually prominently displayed",
            "May include place of birth and date of issue",
        ),
    ),
    "visa": DocumentTemplate(
        name="Visa",
        category="visa",
        description="Visa document or stamp",
        fields=(
            PERSONAL_FIELDS
            + _pick(IDENTIFICATION_FIELDS, "visa_number", "visa_type")
            + TRAVEL_FIELDS
            + ADDRESS_FIELDS
        ),
        examples=(
            "Look for visa number, type, and validity dates",
            "May include sponsor information",
            "Check for entry/exit stamps",
        ),
    ),
    "education": DocumentTemplate(
        name="Education Document",
        category="education",
        description="Academic transcripts, diplomas, certificates",
        fields=PERSONAL_FIELDS + EDUCATION_FIELDS,
        examples=(
            "Look for institution name, degree, graduation date",
            "May include GPA, honors, or academic achievements",
            "Check for accreditation information",
        ),
    ),
    "employment": DocumentTemplate(
        name="Employment Document",
        category="employment",
        description="Employment letters, contracts, pay stubs",
        fields=PERSONAL_FIELDS + EMPLOYMENT_FIELDS + CONTACT_FIELDS,
        examples=(
            "Look for employer name, job title, salary",
            "May include employment dates and responsibilities",
            "Check for company letterhead and contact information",
        ),
    ),
    "financial": DocumentTemplate(
        name="Financial Document",
        category="financial",
        description="Bank statements, financial certificates",
        fields=PERSONAL_FIELDS + FINANCIAL_FIELDS + ADDRESS_FIELDS,
        examples=(
            "Look for account numbers, balances, transaction history",
            "May include bank contact information",
            "Check for account holder details",
        ),
    ),
    "birth_certificate": DocumentTemplate(
        name="Birth Certificate",
        category="birth_certificate",
        description="Civil birth record or certified extract",
        fields=PERSONAL_FIELDS + BIRTH_RECORD_FIELDS,
        examples=(
            "Look for the registrant's name, date and place of birth",
            "Parents' names are usually listed in their own section",
            "The registration number is often near the registrar's seal",
        ),
    ),
    "marriage_certificate": DocumentTemplate(
        name="Marriage Certificate",
        category="marriage_certificate",
        description="Civil marriage record or certificate",
        fields=PERSONAL_FIELDS + MARRIAGE_RECORD_FIELDS,
        examples=(
            "Look for both spouses' names and the date of marriage",
            "The place of marriage may be a city, parish, or registry office",
            "Certificate numbers are usually printed at the top or bottom",
        ),
    ),
    GENERAL_TEMPLATE_KEY: DocumentTemplate(
        name="General Document",
        category=GENERAL_TEMPLATE_KEY,
        description="Any other immigration-related document",
        fields=(
            PERSONAL_FIELDS
            + IDENTIFICATION_FIELDS
            + CONTACT_FIELDS
            + ADDRESS_FIELDS
            + PASSPORT_FIELDS
            + TRAVEL_FIELDS
            + EMPLOYMENT_FIELDS
            + EDUCATION_FIELDS
            + FINANCIAL_FIELDS
            + BIRTH_RECORD_FIELDS
            + MARRIAGE_RECORD_FIELDS
        ),
        examples=(
            "Extract any relevant personal, contact, or identification information",
            "Look for dates, numbers, and official identifiers",
            "Identify document type and purpose",
        ),
    ),
}


def get_template_for_category(category: str) -> DocumentTemplate:
    return DOCUMENT_TEMPLATES.get(category or "", DOCUMENT_TEMPLATES[GENERAL_TEMPLATE_KEY])


def iter_templates() -> Iterable[Tuple[str, DocumentTemplate]]:
    return DOCUMENT_TEMPLATES.items()


def template_field_names(template: DocumentTemplate) -> List[str]:
    seen: List[str] = []
    for definition in template.fields:
        if definition.name not in seen:
            seen.append(definition.name)
    return seen


def template_registry_payload() -> Dict[str, object]:
    payload: Dict[str, object] = {}
    for key, template in iter_templates():
        payload[key] = {
            "name": template.name,
            "category": template.category,
            "description": template.description,
            "examples": list(template.examples),
            "fields": [
                {
                    "name": spec.name,
                    "description": spec.description,
                    "category": spec.category,
                    "examples": list(spec.examples),
                    "validation_rules": list(spec.validation_rules),
                    "required": spec.required,
                }
                for spec in template.fields
            ],
        }
    return {"templates": payload, "categories": list(FIELD_CATEGORIES)}
