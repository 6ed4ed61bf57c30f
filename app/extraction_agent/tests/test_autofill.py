from __future__ import annotations

from extraction_agent.pipeline.autofill import autofill_form, build_data_map, field_name_variations
from extraction_agent.pipeline.normalize import normalize_date_input
from extraction_agent.schemas import ExtractedField

FORM_FIELDS = {
    "personal_info": {
        "surnames": {"type": "text", "required": True},
        "givenNames": {"type": "text"},
        "date_of_birth": {"type": "date", "required": True},
        "nationality": {"type": "text"},
        "marital_status": {"type": "select"},
    },
    "passport_info": {
        "passport_number": {"type": "text"},
        "passport_expiration_date": {"type": "date"},
    },
    "us_history": {
        "us_visa_issued": {"type": "radio"},
    },
    "security_background2": {
        "arrested_or_convicted": {"type": "radio"},
        "arrested_or_convicted_explain": {"type": "textarea"},
    },
    "notes": "not a section",
}


def _extracted(**values: str) -> list:
    return [ExtractedField(field_name=name, field_value=value, confidence_score=0.9) for name, value in values.items()]


def test_fills_by_mapping_name_and_variations() -> None:
    extracted = _extracted(last_name="Smith", nationality="british", passport_number="X1234567")
    extracted.append(ExtractedField(field_name="given names", field_value="John", confidence_score=0.9))
    extracted.append(ExtractedField(field_name="us visa issued", field_value="yes", confidence_score=0.9))

    filled = autofill_form(FORM_FIELDS, extracted, field_mappings={"last_name": "personal_info.surnames"})

    assert filled["personal_info.surnames"] == "Smith"
    assert filled["personal_info.givenNames"] == "John"
    assert filled["personal_info.nationality"] == "BRITISH"
    assert filled["passport_info.passport_number"] == "X1234567"
    assert filled["us_history.us_visa_issued"] == "Yes"
    assert "personal_info.marital_status" not in filled


def test_date_fields_use_input_format() -> None:
    extracted = _extracted(date_of_birth="15 March 1990", passport_expiration_date="not recorded")
    filled = autofill_form(FORM_FIELDS, extracted)
    assert filled["personal_info.date_of_birth"] == "1990-03-15"
    assert filled["passport_info.passport_expiration_date"] == "not recorded"


def test_security_answers_are_normalized() -> None:
    extracted = _extracted(arrested_or_convicted="NO", arrested_or_convicted_explain="minor traffic offence")
    filled = autofill_form(FORM_FIELDS, extracted)
    assert filled["security_background2.arrested_or_convicted"] == "No"
    assert filled["security_background2.arrested_or_convicted_explain"] == "MINOR TRAFFIC OFFENCE"


def test_licence_and_visa_numbers_answer_their_questions() -> None:
    extracted = _extracted(us_driver_license="D1234567", previous_us_visa="B1B2-998877", ten_printed="2019 in London")
    filled = autofill_form({}, extracted)
    assert filled == {
        "us_history.driver_license_number": "D1234567",
        "us_history.us_driver_license": "Yes",
        "us_history.last_visa_number": "B1B2-998877",
        "us_history.previous_us_visa": "Yes",
        "us_history.ten_printed": "Yes",
    }


def test_yes_no_answers_are_not_treated_as_numbers() -> None:
    filled = autofill_form({}, _extracted(us_driver_license="no", previous_us_visa="Yes", ten_printed="no"))
    assert filled == {}


def test_mapping_falls_back_when_source_empty() -> None:
    extracted = _extracted(passport_number="X1234567", document_number="")
    filled = autofill_form(
        FORM_FIELDS, extracted, field_mappings={"document_number": "passport_info.passport_number"}
    )
    assert filled["passport_info.passport_number"] == "X1234567"


def test_data_map_accepts_plain_dicts() -> None:
    data_map = build_data_map(
        [{"field_name": "city", "field_value": "Lyon"}, {"field_name": "salary", "field_value": None}, {"field_value": "x"}]
    )
    assert data_map == {"city": "Lyon", "salary": ""}


def test_variations_and_date_helper() -> None:
    assert field_name_variations("date_of_birth") == ["date_of_birth", "dateofbirth", "date of birth", "date_of_birth"]
    assert field_name_variations("givenNames")[-1] == "given names"
    assert normalize_date_input("03/15/1990") == "1990-03-15"
    assert normalize_date_input("") == ""
