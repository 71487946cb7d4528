# src/checklist_pipeline/schema.py

from typing import List, Tuple, Dict


# ─────────────────────────────────────────────────────────────────────────────────
#   Checklist Items Schema (Advance list export)
# ─────────────────────────────────────────────────────────────────────────────────

SCHEMA_CHECKLIST_ITEMS: List[Tuple[str, str]] = [
    ("user_id",                 "INTEGER"),
    ("first_name",              "STRING"),
    ("last_name",               "STRING"),
    ("checklist_id",            "INTEGER"),
    ("checklist_name",          "STRING"),
    ("checklist_item_id",       "INTEGER"),
    ("checklist_item",          "STRING"),
    ("date_completed",          "DATE"),
    ("date_requested",          "DATE"),
    ("date_due",                "DATE"),
    ("date_waived",             "DATE"),

    # ─── Decision Fields (person-level, repeated on every row) ──────────────
    ("candidate_decision",      "STRING"),   # e.g. "I Accept", "I Decline"
    ("school_decision",         "STRING"),   # e.g. "Accepted", "Waitlist", "Denied"
    ("reason_declined",         "STRING"),
    ("inactive",                "STRING"),   # Boolean-like text
    ("inactive_reason",         "STRING"),
    ("candidate_status",        "STRING"),
    ("entering_grade",          "STRING"),
    ("candidate_entering_year", "STRING"),
    # ────────────────────────────────────────────────────────────────────────

    # ─── Contract Fields ────────────────────────────────────────────────────
    ("contract_status",         "STRING"),
    ("contract_type",           "STRING"),
    ("contract_year",           "STRING"),
    ("contract_send_date",      "DATE"),
    ("contract_publish_date",   "DATE"),
    ("contract_return_date",    "DATE"),
    ("contract_dep_rec_date",   "DATE"),
    # ────────────────────────────────────────────────────────────────────────

    # ─── Testing Fields ─────────────────────────────────────────────────────
    ("test_rescheduled",        "DATE"),
    ("test_no_show",            "STRING"),   # Boolean-like text
    ("test_short_description",  "STRING"),   # Which assessment the row relates to
    # ────────────────────────────────────────────────────────────────────────
]

# Candidates API rows carry the step-level status ("Completed", "Waived")
SCHEMA_CANDIDATE_CHECKLIST_ITEMS: List[Tuple[str, str]] = SCHEMA_CHECKLIST_ITEMS + [
    ("step_status",             "STRING"),
]


# ─────────────────────────────────────────────────────────────────────────────────
#   Blackbaud Field Map (column -> API key aliases, first present wins)
# ─────────────────────────────────────────────────────────────────────────────────

BLACKBAUD_CHECKLIST_FIELD_MAP: Dict[str, Tuple[str, ...]] = {
    "user_id":                 ("user_id", "UserId", "system_record_id"),
    "first_name":              ("first_name", "FirstName"),
    "last_name":               ("last_name", "LastName"),
    "checklist_id":            ("checklist_id", "ChecklistId"),
    "checklist_name":          ("checklist_name", "ChecklistName"),
    "checklist_item_id":       ("checklist_item_id", "ChecklistItemId", "id"),
    "checklist_item":          ("checklist_item", "ChecklistItem"),
    "date_completed":          ("date_completed", "DateCompleted"),
    "date_requested":          ("date_requested", "DateRequested"),
    "date_due":                ("date_due", "DateDue"),
    "date_waived":             ("date_waived", "DateWaived"),
    "step_status":             ("step_status", "StepStatus"),
    "candidate_decision":      ("candidate_decision", "CandidateDecision"),
    "school_decision":         ("school_decision", "SchoolDecision"),
    "reason_declined":         ("reason_declined", "ReasonDeclined"),
    "inactive":                ("inactive", "Inactive"),
    "inactive_reason":         ("inactive_reason", "InactiveReason"),
    "candidate_status":        ("candidate_status", "CandidateStatus"),
    "entering_grade":          ("entering_grade", "EnteringGrade"),
    "candidate_entering_year": ("candidate_entering_year", "entering_year", "CandidateEnteringYear"),
    "contract_status":         ("contract_status", "ContractStatus"),
    "contract_type":           ("contract_type", "ContractType"),
    "contract_year":           ("contract_year", "ContractYear"),
    "contract_send_date":      ("contract_send_date", "ContractSendDate"),
    "contract_publish_date":   ("contract_publish_date", "ContractPublishDate"),
    "contract_return_date":    ("contract_return_date", "ContractReturnDate"),
    "contract_dep_rec_date":   ("contract_dep_rec_date", "ContractDepRecDate"),
    "test_rescheduled":        ("test_rescheduled", "TestRescheduled"),
    "test_no_show":            ("test_no_show", "TestNoShow"),
    "test_short_description":  ("test_short_description", "TestShortDescription"),
}

# Columns the stage logic reads; the store selects only these
STAGE_INPUT_COLUMNS: List[str] = [
    "user_id",
    "checklist_name",
    "checklist_item",
    "date_completed",
    "date_requested",
    "candidate_decision",
    "school_decision",
    "reason_declined",
    "inactive",
    "contract_publish_date",
    "contract_return_date",
    "contract_dep_rec_date",
    "test_no_show",
    "test_short_description",
]

DATE_COLUMNS = {col for col, col_type in SCHEMA_CANDIDATE_CHECKLIST_ITEMS if col_type == "DATE"}
INTEGER_COLUMNS = {col for col, col_type in SCHEMA_CANDIDATE_CHECKLIST_ITEMS if col_type == "INTEGER"}
