# tests/test_store.py

import logging
from datetime import date

import pytest
from google.api_core.exceptions import BadRequest

from checklist_pipeline.checklist_stages import store
from checklist_pipeline.checklist_stages.models import Stage, StageResult


class DummyJob:
    def __init__(self, rows):
        self._rows = rows

    def result(self):
        return iter(self._rows)


class DummyClient:
    """Stands in for bigquery.Client; filters rows on the user_id parameter"""

    def __init__(self, rows, error=None):
        self.rows = rows
        self.error = error
        self.queries = []

    def query(self, query, job_config=None):
        self.queries.append((query, job_config))
        if self.error:
            raise self.error
        rows = self.rows
        if job_config is not None:
            user_id = job_config.query_parameters[0].value
            rows = [row for row in rows if row.get("user_id") == user_id]
        return DummyJob(rows)


ROWS = [
    {"user_id": 1, "first_name": "Ada", "last_name": "Lovelace", "checklist_name": "Application Form",
     "checklist_item": "Online Application", "date_completed": date(2024, 1, 5), "date_requested": None},
    {"user_id": 1, "checklist_name": "Assessments", "checklist_item": "Fairmont Admissions Assessment",
     "date_completed": None, "date_requested": date(2024, 2, 1)},
    {"user_id": 2, "checklist_name": "Enrollment Contract Received", "checklist_item": "Contract",
     "date_completed": date(2024, 3, 1), "candidate_decision": "I Decline"},
    {"user_id": None, "checklist_name": "Application Form", "date_completed": date(2024, 1, 1)},
]


@pytest.fixture(autouse=True)
def bigquery_env(monkeypatch):
    monkeypatch.setenv("BIGQUERY_PROJECT_ID", "test-project")
    monkeypatch.setenv("BIGQUERY_DATASET_ID", "test_dataset")
    monkeypatch.delenv("CHECKLIST_TABLE", raising=False)


def test_select_columns_depend_on_table():
    assert "step_status" not in store.get_select_columns("checklist_items")
    assert "step_status" in store.get_select_columns("candidate_checklist_items")

    display = store.get_select_columns("candidate_checklist_items", include_display=True)
    assert display[:3] == ["user_id", "first_name", "last_name"]
    assert "date_waived" in display


def test_load_rows_for_user_uses_query_parameter():
    client = DummyClient(ROWS)

    rows = store.load_checklist_rows(user_id=1, client=client)

    assert len(rows) == 2
    query, job_config = client.queries[0]
    assert "`test-project.test_dataset.checklist_items`" in query
    assert "WHERE user_id = @user_id" in query
    assert job_config.query_parameters[0].name == "user_id"
    assert job_config.query_parameters[0].value == 1


def test_load_rows_reads_candidate_table(monkeypatch):
    monkeypatch.setenv("CHECKLIST_TABLE", "candidate_checklist_items")
    client = DummyClient(ROWS)

    store.load_checklist_rows(client=client)

    query, job_config = client.queries[0]
    assert "candidate_checklist_items" in query
    assert "step_status" in query
    assert job_config is None


def test_unknown_checklist_table_falls_back(monkeypatch, caplog):
    monkeypatch.setenv("CHECKLIST_TABLE", "other_table")
    caplog.set_level(logging.WARNING)
    client = DummyClient(ROWS)

    store.load_checklist_rows(client=client)

    assert "checklist_items`" in client.queries[0][0]
    assert "Unknown CHECKLIST_TABLE" in caplog.text


def test_stage_for_user():
    client = DummyClient(ROWS)
    assert store.get_stage_and_substage_for_user(1, client=client) == StageResult(Stage.APPLICATION, 15)


def test_stage_for_unknown_user_is_empty():
    client = DummyClient(ROWS)
    assert store.get_stage_and_substage_for_user(99, client=client) == StageResult(None, None)


def test_stage_for_all_users_skips_unattributed_rows():
    results = store.get_stage_and_substage_for_all_users(client=DummyClient(ROWS))

    assert results == {
        1: StageResult(Stage.APPLICATION, 15),
        2: StageResult(Stage.CLOSED_LOST, 28),
    }


def test_breakdown_for_user():
    data = store.get_breakdown_for_user(1, client=DummyClient(ROWS))

    assert data["user_id"] == 1
    assert data["checklist_table"] == "checklist_items"
    assert data["first_name"] == "Ada"
    assert data["checklist_rows"][0]["date_completed"] == "2024-01-05"
    assert data["person_view"]["checklist_completion"] == {
        "Application Form": True, "Online Application": True,
    }
    assert data["breakdown"]["stage"] == "Application"
    assert data["breakdown"]["substage"] == 15
    assert data["breakdown"]["substage_label"] == "Assessment scheduled"


def test_breakdown_for_user_without_rows():
    data = store.get_breakdown_for_user(42, client=DummyClient(ROWS))

    assert data["checklist_rows"] == []
    assert data["breakdown"] is None
    assert data["message"] == "No checklist data found for this user."


def test_query_errors_are_logged_and_raised(caplog):
    caplog.set_level(logging.ERROR)
    client = DummyClient(ROWS, error=BadRequest("bad query"))

    with pytest.raises(BadRequest):
        store.load_checklist_rows(client=client)

    assert "Failed to load checklist rows" in caplog.text
