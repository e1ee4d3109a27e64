import json

import pytest

from resume_optimizer.models.completion_models import ContactInfo
from resume_optimizer.optimization.response_repair import (
    build_fallback_resume,
    coerce_structured_resume,
    extract_json_span,
    parse_model_output,
    repair_model_output,
    strip_code_fences,
)

CONTACT = ContactInfo(fullName="Ana Lee", email="ana@x.com", phone="+1 555 0100")

WELL_FORMED = {
    "name": "Ana Lee",
    "email": "ana@x.com",
    "mobileNumbers": ["+1 555 0100"],
    "profileUrl": "https://linkedin.com/in/ana",
    "summary": "Backend engineer with 6 years building Python services.",
    "experience": [
        {
            "organization": "Acme",
            "term": "01/2020 - Present",
            "title": "Senior Engineer",
            "bullets": ["Cut p95 latency by 40% across 12 services"],
        }
    ],
    "skillGroups": [{"groupName": "Core", "skills": ["Python", "AWS"]}],
    "education": [{"degree": "BSc Computer Science", "institution": "State U", "term": "2012 - 2016"}],
}


def assert_fully_populated(resume):
    data = resume.to_dict()
    assert data["name"]
    assert data["email"]
    assert data["profileUrl"]
    assert data["summary"]
    assert data["experience"]
    assert data["skillGroups"]
    assert data["education"]
    for entry in data["experience"]:
        assert set(entry) == {"organization", "term", "title", "bullets"}
    for group in data["skillGroups"]:
        assert set(group) == {"groupName", "skills"}
    for entry in data["education"]:
        assert set(entry) == {"degree", "institution", "term"}


def test_strip_code_fences_removes_json_fence():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'


def test_extract_json_span_slices_outer_braces():
    assert extract_json_span('Here you go: {"a": {"b": 2}} thanks') == '{"a": {"b": 2}}'
    assert extract_json_span("no braces here") is None
    assert extract_json_span("} backwards {") is None


def test_parse_model_output_failures():
    assert not parse_model_output("I cannot help with that.").ok
    assert not parse_model_output("{not json}").ok
    result = parse_model_output("")
    assert not result.ok
    assert result.error


def test_parse_model_output_fenced_object():
    result = parse_model_output('```json\n{"name": "Ana"}\n```')
    assert result.ok
    assert result.value == {"name": "Ana"}


def test_well_formed_output_round_trips_unchanged():
    resume = repair_model_output(json.dumps(WELL_FORMED), CONTACT, current_year=2024)
    assert resume.to_dict() == WELL_FORMED


def test_fenced_output_with_prose_is_repaired():
    raw = "Sure! Here is the resume:\n```json\n" + json.dumps(WELL_FORMED) + "\n```\nGood luck."
    resume = repair_model_output(raw, CONTACT, current_year=2024)
    assert resume.to_dict() == WELL_FORMED


def test_plain_text_uses_fallback_with_contact():
    resume = repair_model_output("Sorry, I cannot produce JSON today.", CONTACT, current_year=2024)
    data = resume.to_dict()
    assert data["name"] == "Ana Lee"
    assert data["email"] == "ana@x.com"
    assert data["mobileNumbers"] == ["+1 555 0100"]
    assert data["profileUrl"] == "https://linkedin.com/in/ana-lee"
    assert data["experience"][0]["organization"] == "Technology Solutions Inc."
    assert data["education"][0]["term"] == "2015 - 2019"
    assert_fully_populated(resume)


def test_missing_fields_filled_with_defaults():
    resume = repair_model_output('{"name": "Ana Lee"}', CONTACT, current_year=2024)
    data = resume.to_dict()
    assert data["email"] == "ana@x.com"
    assert data["mobileNumbers"] == ["+1 555 0100"]
    assert data["summary"].startswith("Dynamic Ana ")
    assert data["experience"][0]["organization"] == "Professional Experience Inc."
    assert [g["groupName"] for g in data["skillGroups"]] == ["Professional Competencies", "Technical Skills"]
    assert data["education"] == [{"degree": "Bachelor of Science", "institution": "University", "term": "2016 - 2020"}]


def test_wrong_shapes_replaced_with_defaults():
    raw = json.dumps({
        "name": 42,
        "experience": "five years at Acme",
        "skillGroups": {"groupName": "Core"},
        "education": [None, "State U"],
        "mobileNumbers": "555",
    })
    resume = repair_model_output(raw, CONTACT, current_year=2024)
    data = resume.to_dict()
    assert data["name"] == "Ana Lee"
    assert data["mobileNumbers"] == ["+1 555 0100"]
    assert_fully_populated(resume)


def test_legacy_key_names_are_accepted():
    raw = json.dumps({
        "name": "Ana Lee",
        "email": "ana@x.com",
        "linkedinUrl": "https://linkedin.com/in/ana",
        "professionalSummary": "Seasoned engineer.",
        "professionalExperience": [
            {"jobName": "Acme", "jobDesignation": "Engineer", "term": "2019 - 2021", "jobDetails": ["Shipped it"]}
        ],
        "skills": [{"skillName": "Languages", "skills": ["Python"]}],
        "education": [{"degree": "BSc", "collegeName": "State U", "tenure": "2012 - 2016"}],
    })
    data = repair_model_output(raw, CONTACT).to_dict()
    assert data["profileUrl"] == "https://linkedin.com/in/ana"
    assert data["summary"] == "Seasoned engineer."
    assert data["experience"] == [
        {"organization": "Acme", "term": "2019 - 2021", "title": "Engineer", "bullets": ["Shipped it"]}
    ]
    assert data["skillGroups"] == [{"groupName": "Languages", "skills": ["Python"]}]
    assert data["education"] == [{"degree": "BSc", "institution": "State U", "term": "2012 - 2016"}]


def test_current_key_wins_over_legacy_key():
    raw = json.dumps({"summary": "Current.", "professionalSummary": "Legacy."})
    assert repair_model_output(raw, CONTACT).summary == "Current."


def test_blank_current_key_falls_back_to_legacy_key():
    raw = json.dumps({"summary": "  ", "professionalSummary": "Legacy."})
    assert repair_model_output(raw, CONTACT).summary == "Legacy."


def test_profile_url_prefers_contact_before_generated_default():
    contact = ContactInfo(fullName="Ana Lee", email="ana@x.com", profileUrl="https://linkedin.com/in/custom")
    assert repair_model_output("{}", contact).profile_url == "https://linkedin.com/in/custom"


def test_fallback_resume_without_phone_has_no_numbers():
    contact = ContactInfo(fullName="Ana Lee", email="ana@x.com")
    fallback = build_fallback_resume(contact, current_year=2024)
    assert fallback["mobileNumbers"] == []
    assert coerce_structured_resume(fallback, contact).mobile_numbers == []


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "null",
        "[1, 2, 3]",
        '{"experience": [{}], "skillGroups": [{}], "education": [{}]}',
        '```json\n{"name": "Ana"',
        '{"experience": [{"organization": "Acme"}]}',
    ],
)
def test_repair_never_raises_and_always_populates(raw):
    assert_fully_populated(repair_model_output(raw, CONTACT, current_year=2024))
