from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .normalize import is_yes_no, normalize_date_input, normalize_upper, normalize_yes_no
from ..schemas import ExtractedField

LOGGER = logging.getLogger(__name__)

FormFields = Mapping[str, Mapping[str, Mapping[str, object]]]
ExtractedInput = Union[ExtractedField, Mapping[str, object]]

_SECURITY_YES_NO = {
    "security_background1": [
        "communicable_disease",
        "mental_or_physical_disorder",
        "drug_abuser_or_addict",
    ],
    "security_background2": [
        "arrested_or_convicted",
        "controlled_substances_violation",
        "prostitution_or_vice",
        "money_laundering",
        "human_trafficking_committed_or_conspired",
        "human_trafficking_aided_abetted",
        "human_trafficking_family_benefited",
    ],
    "security_background3": [
        "espionage_or_illegal_activity",
        "terrorist_activities",
        "support_to_terrorists",
        "member_of_terrorist_org",
        "family_engaged_in_terrorism_last_five_years",
        "genocide_involvement",
        "torture_involvement",
        "violence_killings_involvement",
        "child_soldiers_involvement",
        "religious_freedom_violations",
        "population_control_forced_abortion_sterilization",
        "coercive_transplantation",
    ],
    "security_background4": [
        "subject_of_removal_or_deportation_hearing",
        "immigration_benefit_by_fraud_or_misrepresentation",
        "failed_to_attend_hearing_last_five_years",
        "unlawfully_present_or_visa_violation",
        "removed_or_deported_from_any_country",
    ],
    "security_background5": [
        "withheld_child_custody",
        "voted_in_us_violation",
        "renounced_citizenship_to_avoid_tax",
        "former_j_visitor_not_fulfilled_2yr",
        "public_school_f_status_without_reimbursing",
    ],
}

YES_NO_FIELDS = frozenset(
    [
        "travel_info.specific_travel_plans",
        "traveling_companions.traveling_with_others",
        "traveling_companions.traveling_as_group",
        "us_history.been_in_us",
        "us_history.us_driver_license",
        "us_history.us_visa_issued",
        "us_history.visa_lost_stolen",
        "us_history.visa_cancelled_revoked",
        "us_history.visa_refused",
        "us_history.immigrant_petition",
        "contact_info.mailing_same_as_home",
        "contact_info.other_phone_numbers",
        "contact_info.other_email_addresses",
        "contact_info.other_websites",
        "passport_info.passport_lost_stolen",
        "family_info.father_in_us",
        "family_info.mother_in_us",
        "family_info.immediate_relatives_us",
        "family_info.other_relatives_us",
        "previous_work_education.previously_employed",
        "previous_work_education.attended_educational_institutions",
        "additional_occupation.belong_clan_tribe",
        "additional_occupation.traveled_last_five_years",
        "additional_occupation.belonged_professional_org",
        "additional_occupation.specialized_skills_training",
        "additional_occupation.served_military",
        "additional_occupation.involved_paramilitary",
    ]
    + [f"{section}.{name}" for section, names in _SECURITY_YES_NO.items() for name in names]
)

UPPERCASE_FIELDS = frozenset(
    [
        "personal_info.marital_status",
        "personal_info.place_of_birth_country",
        "personal_info.nationality",
        "traveling_companions.companion_surnames",
        "traveling_companions.companion_given_names",
        "contact_info.home_country",
        "contact_info.mailing_country",
        "passport_info.passport_issuing_country",
        "passport_info.passport_issued_country",
        "passport_info.lost_passport_country",
        "us_contact.contact_surnames",
        "us_contact.contact_given_names",
        "us_contact.contact_organization",
        "family_info.father_surnames",
        "family_info.father_given_names",
        "family_info.mother_surnames",
        "family_info.mother_given_names",
        "family_info.relative_surnames",
        "family_info.relative_given_names",
        "present_work_education.employer_school_name",
        "present_work_education.employer_city",
        "present_work_education.employer_state",
        "present_work_education.employer_country",
        "present_work_education.job_duties",
        "present_work_education.other_occupation_specification",
        "present_work_education.not_employed_explanation",
        "previous_work_education.previous_employer_name",
        "previous_work_education.previous_employer_city",
        "previous_work_education.previous_employer_state",
        "previous_work_education.previous_employer_country",
        "previous_work_education.previous_job_title",
        "previous_work_education.previous_supervisor_surname",
        "previous_work_education.previous_supervisor_given_names",
        "previous_work_education.previous_job_duties",
        "previous_work_education.educational_institution_name",
        "previous_work_education.educational_city",
        "previous_work_education.educational_state",
        "previous_work_education.educational_country",
        "previous_work_education.course_of_study",
        "additional_occupation.clan_tribe_name",
        "additional_occupation.language_name",
        "additional_occupation.traveled_country_region",
        "additional_occupation.professional_org_name",
        "additional_occupation.specialized_skills_explain",
        "additional_occupation.military_country_region",
        "additional_occupation.military_branch",
        "additional_occupation.military_rank_position",
        "additional_occupation.military_specialty",
        "additional_occupation.involved_paramilitary_explain",
    ]
)


def _is_uppercase_field(key: str) -> bool:
    if key in UPPERCASE_FIELDS:
        return True
    return key.startswith("security_background") and key.endswith("_explain")


def build_data_map(extracted: Iterable[ExtractedInput]) -> Dict[str, str]:
    data_map: Dict[str, str] = {}
    for item in extracted:
        if isinstance(item, ExtractedField):
            name, value = item.field_name, item.field_value
        else:
            name, value = item.get("field_name"), item.get("field_value")
        if not name:
            continue
        data_map[str(name)] = "" if value is None else str(value)
    return data_map


def field_name_variations(field_name: str) -> List[str]:
    return [
        field_name,
        field_name.replace("_", ""),
        field_name.replace("_", " "),
        re.sub(r"([A-Z])", r" \1", field_name).lower().strip(),
    ]


def apply_special_normalizations(filled: Dict[str, str], data_map: Mapping[str, str]) -> Dict[str, str]:
    normalized = dict(filled)

    driver_license = data_map.get("us_driver_license") or data_map.get("us driver license")
    if driver_license and not is_yes_no(driver_license):
        normalized["us_history.driver_license_number"] = driver_license
        normalized["us_history.us_driver_license"] = "Yes"

    previous_visa = data_map.get("previous_us_visa") or data_map.get("previous us visa")
    if previous_visa and not is_yes_no(previous_visa):
        normalized["us_history.last_visa_number"] = previous_visa
        normalized["us_history.previous_us_visa"] = "Yes"

    ten_printed = data_map.get("ten_printed") or data_map.get("ten printed")
    if ten_printed and ten_printed.strip() and not is_yes_no(ten_printed):
        normalized["us_history.ten_printed"] = "Yes"

    return normalized


def normalize_form_values(filled: Dict[str, str]) -> Dict[str, str]:
    normalized: Dict[str, str] = {}
    for key, value in filled.items():
        if key in YES_NO_FIELDS:
            updated = normalize_yes_no(value)
        elif _is_uppercase_field(key):
            updated = normalize_upper(value)
        else:
            updated = value
        if updated != value:
            LOGGER.debug("Normalized %s: %s -> %s", key, value, updated)
        normalized[key] = updated
    return normalized


def autofill_form(
    form_fields: FormFields,
    extracted: Iterable[ExtractedInput],
    field_mappings: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Fill ``section.field`` form keys from extracted values.

    Lookup order per form field: explicit extracted->form mapping, then the
    bare field name and its spelling variations. Date-typed fields are
    converted to ``YYYY-MM-DD`` when parseable.
    """
    data_map = build_data_map(extracted)
    mapped_from: Dict[str, str] = {}
    for extracted_name, form_field in (field_mappings or {}).items():
        mapped_from.setdefault(form_field, extracted_name)

    filled: Dict[str, str] = {}
    for section, section_fields in form_fields.items():
        if not isinstance(section_fields, Mapping):
            continue
        for field_name, field_config in section_fields.items():
            full_name = f"{section}.{field_name}"
            value = ""
            source = mapped_from.get(full_name)
            if source and data_map.get(source):
                value = data_map[source]
            if not value:
                for variation in field_name_variations(field_name):
                    if data_map.get(variation):
                        value = data_map[variation]
                        break
            if not value:
                continue
            field_type = field_config.get("type") if isinstance(field_config, Mapping) else None
            if field_type == "date":
                value = normalize_date_input(value)
            filled[full_name] = value

    LOGGER.info("Auto-filled %d form fields from %d extracted values", len(filled), len(data_map))
    return normalize_form_values(apply_special_normalizations(filled, data_map))
