"""
Tests for core values form validation and filing.
"""

import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from lems.core.errors import NotFoundError, ValidationError
from lems.services.cv_forms import CVFormService, validate_cv_form
from sample_data import build_division, record_events


def valid_form():
    return {
        "observers": ["volunteer"],
        "observerAffiliation": "",
        "demonstrators": ["team"],
        "demonstratorAffiliation": "#112",
        "data": {
            "discovery": {
                "teamOrStudent": {"fields": [False, True, False]},
                "anyoneElse": {"fields": [False, False, False]}
            },
            "inclusion": {
                "teamOrStudent": {"fields": [False, False, False]},
                "anyoneElse": {"fields": [False, False, False]}
            }
        },
        "details": "Team helped another team fix their robot",
        "completedBy": {"name": "Dana", "phone": "050-0000000", "affiliation": "Volunteer"},
        "actionTaken": "",
        "severity": None
    }


def test_valid_form():
    assert validate_cv_form(valid_form()) == {}

    print("[PASS] Valid form test passed")


def test_form_rules():
    form = valid_form()
    form["demonstratorAffiliation"] = ""
    form["observers"] = []
    form["details"] = ""
    form["completedBy"]["phone"] = ""
    for category in form["data"].values():
        category["teamOrStudent"]["fields"] = [False, False, False]

    errors = validate_cv_form(form)
    assert set(errors) == {"observers", "demonstratorAffiliation", "data", "details", "completedBy"}

    form = valid_form()
    form["observers"] = ["team", "volunteer"]
    assert set(validate_cv_form(form)) == {"observerAffiliation"}

    print("[PASS] Form rule test passed")


def test_create_and_update():
    store, notifier, division_id = build_division(generate=False)
    events = record_events(notifier, division_id, "judging")
    service = CVFormService(store, notifier)

    form = service.create(division_id, valid_form())
    assert form["divisionId"] == division_id
    assert form["createdAt"] is not None
    assert service.list(division_id)[0]["_id"] == form["_id"]

    updated = service.update(division_id, form["_id"], {"actionTaken": "Thanked the team", "severity": "exceeds"})
    assert updated["actionTaken"] == "Thanked the team"
    assert updated["details"] == form["details"]

    assert [name for name, _ in events] == ["cvFormCreated", "cvFormUpdated"]

    with pytest.raises(NotFoundError):
        service.get("another-division", form["_id"])

    print("[PASS] Create/update test passed")


def test_invalid_form_not_stored():
    store, notifier, division_id = build_division(generate=False)
    service = CVFormService(store, notifier)
    form = valid_form()
    form["details"] = ""

    with pytest.raises(ValidationError) as error:
        service.create(division_id, form)
    assert "details" in error.value.details
    assert service.list(division_id) == []

    print("[PASS] Invalid form test passed")


def test_malformed_data():
    store, notifier, division_id = build_division(generate=False)
    service = CVFormService(store, notifier)

    for data in ({"teamwork": 1}, {"teamwork": {"teamOrStudent": "yes"}}, ["discovery"]):
        form = valid_form()
        form["data"] = data
        assert validate_cv_form(form) == {"data": "Malformed field data"}

    form = valid_form()
    form["data"] = {"teamwork": 1}
    with pytest.raises(ValidationError):
        service.create(division_id, form)
    assert service.list(division_id) == []

    print("[PASS] Malformed data test passed")


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("Running CV Form Tests")
    print("=" * 60 + "\n")

    try:
        test_valid_form()
        test_form_rules()
        test_create_and_update()
        test_invalid_form_not_stored()
        test_malformed_data()

        print("\n" + "=" * 60)
        print("All tests passed!")
        print("=" * 60 + "\n")
        return 0

    except AssertionError as e:
        print(f"\n[FAIL] Test failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(run_all_tests())
