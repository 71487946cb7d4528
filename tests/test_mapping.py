# tests/test_mapping.py

from checklist_pipeline.checklist_ingest.mapping import (
    SYNTHETIC_STEP_ID_BASE,
    get_field,
    map_candidate_to_checklist_rows,
    map_item_to_checklist,
)
from checklist_pipeline.checklist_stages.aggregator import aggregate
from checklist_pipeline.checklist_stages.classifier import classify
from checklist_pipeline.checklist_stages.models import Stage
from checklist_pipeline.schema import SCHEMA_CANDIDATE_CHECKLIST_ITEMS


def _candidate(**decision):
    return {
        "user": {"id": "5501", "first_name": " Ada ", "last_name": "Lovelace"},
        "candidate_checklist": {"id": 77, "name": "Admissions 2025"},
        "entering_grade": {"abbreviation": "G5", "description": "Grade 5"},
        "entering_year": {"description": "2025-2026"},
        "candidate_status": "Applicant",
        "school_decision": decision,
    }


def test_get_field_tries_aliases_and_casing():
    item = {"UserId": 12, "checklistName": "Decision", "date_completed": None, "DateCompleted": "2024-01-01"}

    assert get_field(item, "user_id", "UserId") == 12
    assert get_field(item, "checklist_name") == "Decision"
    assert get_field(item, "date_completed", "DateCompleted") == "2024-01-01"
    assert get_field(item, "missing") is None
    assert get_field(None, "user_id") is None


def test_map_item_to_checklist_coerces_columns():
    item = {
        "UserId": "1001",
        "ChecklistName": "Application Form",
        "ChecklistItemId": "33",
        "ChecklistItem": " Online Application ",
        "DateCompleted": "2024-01-05T14:00:00",
        "DateRequested": "not a date",
        "Inactive": "false",
        "TestNoShow": "2024-02-02",
        "ContractPublishDate": True,
    }
    row = map_item_to_checklist(item)

    assert set(row) == {col for col, _ in SCHEMA_CANDIDATE_CHECKLIST_ITEMS}
    assert row["user_id"] == 1001
    assert row["checklist_item_id"] == 33
    assert row["checklist_item"] == "Online Application"
    assert row["date_completed"] == "2024-01-05"
    assert row["date_requested"] is None
    assert row["inactive"] == "false"
    assert row["test_no_show"] == "2024-02-02"
    assert row["contract_publish_date"] is None


def test_map_item_falls_back_to_constituent_summary():
    item = {
        "constituent_summary": {"system_record_id": 808, "formatted_name": "Grace Hopper", "sort_name": "Hopper"},
        "checklist_name": "Decision",
    }
    row = map_item_to_checklist(item)

    assert row["user_id"] == 808
    assert row["first_name"] == "Grace Hopper"
    assert row["last_name"] == "Hopper"


def test_candidate_without_steps_yields_single_row():
    candidate = _candidate(decision={"description": "Accepted"}, publish_date="2024-04-01T00:00:00Z")
    rows = map_candidate_to_checklist_rows(candidate, None)

    assert len(rows) == 1
    row = rows[0]
    assert row["user_id"] == 5501
    assert row["first_name"] == "Ada"
    assert row["checklist_id"] == 77
    assert row["checklist_item_id"] == 0
    assert row["checklist_name"] == "Admissions 2025"
    assert row["school_decision"] == "Accepted"
    assert row["contract_publish_date"] == "2024-04-01"
    assert row["entering_grade"] == "G5"
    assert row["candidate_entering_year"] == "2025-2026"


def test_candidate_steps_map_one_row_each():
    candidate = _candidate(
        candidate_response={"response": {"description": "I Decline"},
                            "decline_reason": {"description": "Moved"}},
    )
    checklist = {
        "type": {"id": 9, "name": "Admissions Checklist"},
        "steps": [
            {"id": 1, "type": {"id": 101, "name": "Application Form"}, "status": "Completed"},
            {"id": 1, "type": {"id": 102, "name": "Fairmont Admissions Assessment"},
             "due_date": "2024-02-10T00:00:00"},
            {"name": "Transcript", "date_waived": "2024-01-20", "status": "Waived"},
        ],
    }
    rows = map_candidate_to_checklist_rows(candidate, checklist)

    assert [row["checklist_item"] for row in rows] == [
        "Application Form", "Fairmont Admissions Assessment", "Transcript",
    ]
    assert [row["checklist_item_id"] for row in rows] == [101, 102, SYNTHETIC_STEP_ID_BASE + 2]
    assert all(row["checklist_id"] == 9 for row in rows)
    assert rows[0]["step_status"] == "Completed"
    assert rows[1]["date_requested"] == "2024-02-10"
    assert rows[1]["date_due"] == "2024-02-10"
    assert rows[2]["date_waived"] == "2024-01-20"
    assert all(row["candidate_decision"] == "I Decline" for row in rows)
    assert rows[0]["reason_declined"] == "Moved"


def test_mapped_candidate_rows_feed_the_stage_engine():
    candidate = _candidate(decision={"description": "Accepted"})
    checklist = {
        "type": {"id": 9, "name": "Admissions Checklist"},
        "steps": [
            {"type": {"id": 101, "name": "Application Form"}, "status": "Completed"},
            {"type": {"id": 102, "name": "Decision"}, "date_completed": "2024-03-01"},
        ],
    }
    view = aggregate(map_candidate_to_checklist_rows(candidate, checklist))[5501]
    result = classify(view)

    assert result.stage == Stage.DECISION
    assert result.substage == 23
