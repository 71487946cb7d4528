# src/checklist_pipeline/checklist_ingest/mapping.py

import logging
import re
from typing import Any, Dict, List, Optional

from checklist_pipeline.schema import (
    BLACKBAUD_CHECKLIST_FIELD_MAP,
    DATE_COLUMNS,
    INTEGER_COLUMNS,
    SCHEMA_CANDIDATE_CHECKLIST_ITEMS,
)
from .normalization import to_date, to_num, to_str

# Offset for synthetic step ids when the API omits both step.type.id and step.id
SYNTHETIC_STEP_ID_BASE = 1000000

def _snake(key: str) -> str:
    return re.sub(r'([A-Z])', r'_\1', key).lower().lstrip('_')

def _camel(key: str) -> str:
    return re.sub(r'_([a-z])', lambda m: m.group(1).upper(), key)

def get_field(obj: Optional[Dict[str, Any]], *keys: str) -> Any:
    """
    Look up the first non-null value among several key aliases.

    Each alias is also tried in its snake_case and camelCase spelling, since
    the Blackbaud list output is not consistent about either.
    """
    if not isinstance(obj, dict):
        return None
    for key in keys:
        for candidate in (key, _snake(key), _camel(key)):
            value = obj.get(candidate)
            if value is not None:
                return value
    return None

def _nested(obj: Optional[Dict[str, Any]], *path: str) -> Any:
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj

def empty_checklist_row() -> Dict[str, Any]:
    """A row with every column of the candidate checklist schema set to None."""
    return {col: None for col, _ in SCHEMA_CANDIDATE_CHECKLIST_ITEMS}

def map_item_to_checklist(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map a single Advance list item to a checklist_items row.

    Args:
        item: One entry of the Blackbaud list API "value" array

    Returns:
        dict: Row keyed by checklist schema column names
    """
    row = empty_checklist_row()

    for column, aliases in BLACKBAUD_CHECKLIST_FIELD_MAP.items():
        raw = get_field(item, *aliases)
        if column in DATE_COLUMNS:
            row[column] = to_date(raw)
        elif column in INTEGER_COLUMNS:
            row[column] = to_num(raw)
        else:
            row[column] = to_str(raw)

    # Some list outputs only expose the constituent summary
    summary = get_field(item, 'constituent_summary')
    if row['user_id'] is None:
        row['user_id'] = to_num(get_field(summary, 'system_record_id'))
    if row['first_name'] is None:
        row['first_name'] = to_str(get_field(summary, 'formatted_name'))
    if row['last_name'] is None:
        row['last_name'] = to_str(get_field(summary, 'sort_name'))

    return row

def _candidate_fields(candidate: Dict[str, Any]) -> Dict[str, Any]:
    """Candidate-level fields repeated on every row for that candidate."""
    decision = _nested(candidate, 'school_decision') or {}
    return {
        'user_id': to_num(_nested(candidate, 'user', 'id')),
        'first_name': to_str(_nested(candidate, 'user', 'first_name')),
        'last_name': to_str(_nested(candidate, 'user', 'last_name')),
        'candidate_decision': to_str(_nested(decision, 'candidate_response', 'response', 'description')),
        'school_decision': to_str(_nested(decision, 'decision', 'description')),
        'reason_declined': to_str(_nested(decision, 'candidate_response', 'decline_reason', 'description')),
        'contract_publish_date': to_date(decision.get('publish_date')),
        'entering_grade': (
            to_str(_nested(candidate, 'entering_grade', 'abbreviation'))
            or to_str(_nested(candidate, 'entering_grade', 'description'))
        ),
        'candidate_entering_year': to_str(_nested(candidate, 'entering_year', 'description')),
        'candidate_status': to_str(candidate.get('candidate_status')),
    }

def _step_to_row(candidate: Dict[str, Any], step: Dict[str, Any],
                 checklist: Dict[str, Any], step_index: int) -> Dict[str, Any]:
    row = empty_checklist_row()
    row.update(_candidate_fields(candidate))

    # Checklist type id keeps every step of one checklist under the same key
    checklist_id = to_num(_nested(checklist, 'type', 'id'))
    if checklist_id is None:
        checklist_id = to_num(_nested(candidate, 'candidate_checklist', 'id'))
    row['checklist_id'] = checklist_id if checklist_id is not None else 0
    row['checklist_name'] = (
        to_str(_nested(checklist, 'type', 'name'))
        or to_str(_nested(candidate, 'candidate_checklist', 'name'))
    )

    # step.id is reused across steps by the API; step.type.id is stable
    item_id = to_num(_nested(step, 'type', 'id'))
    if item_id is None:
        item_id = to_num(step.get('id'))
    row['checklist_item_id'] = item_id if item_id is not None else SYNTHETIC_STEP_ID_BASE + step_index
    row['checklist_item'] = to_str(_nested(step, 'type', 'name')) or to_str(step.get('name'))

    row['step_status'] = to_str(step.get('status'))
    row['date_completed'] = to_date(step.get('date_completed'))
    row['date_requested'] = to_date(step.get('date_requested')) or to_date(step.get('due_date'))
    row['date_due'] = to_date(step.get('due_date'))
    row['date_waived'] = to_date(step.get('date_waived'))
    return row

def map_candidate_to_checklist_rows(candidate: Dict[str, Any],
                                    checklist: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Convert one Candidates API candidate and its checklist into checklist rows.

    One row per checklist step, with candidate-level decision fields merged in.
    A candidate without a checklist (or with no steps) still yields a single
    candidate-level row so the stage logic sees the decision fields.

    Args:
        candidate: Candidate payload
        checklist: Candidate checklist payload, or None if it was not fetched

    Returns:
        list: Checklist rows keyed by schema column names
    """
    logger = logging.getLogger('checklist.mapping')
    steps = (checklist or {}).get('steps') or []

    if not steps:
        row = empty_checklist_row()
        row.update(_candidate_fields(candidate))
        checklist_id = to_num(_nested(checklist, 'type', 'id'))
        if checklist_id is None:
            checklist_id = to_num(_nested(candidate, 'candidate_checklist', 'id'))
        row['checklist_id'] = checklist_id if checklist_id is not None else 0
        row['checklist_item_id'] = 0
        row['checklist_name'] = (
            to_str(_nested(checklist, 'type', 'name'))
            or to_str(_nested(candidate, 'candidate_checklist', 'name'))
        )
        logger.debug(f"Candidate {row['user_id']} has no checklist steps; emitting candidate-level row")
        return [row]

    rows = [_step_to_row(candidate, step, checklist, index) for index, step in enumerate(steps)]
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Mapped candidate {rows[0]['user_id']} to {len(rows)} checklist rows")
    return rows
