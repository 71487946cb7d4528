# src/checklist_pipeline/checklist_stages/store.py

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from google.cloud import bigquery
from google.api_core.exceptions import GoogleAPIError

from checklist_pipeline.schema import STAGE_INPUT_COLUMNS
from .aggregator import aggregate
from .classifier import classify, classify_all, classify_with_breakdown
from .config import get_checklist_table, get_table_reference
from .models import StageResult

# Extra display columns for the single-user breakdown
DISPLAY_COLUMNS = ["first_name", "last_name"]

def get_bigquery_client():
    return bigquery.Client()

def get_select_columns(table: str, include_display: bool = False) -> List[str]:
    """
    Columns to select for the stage logic.

    candidate_checklist_items adds step_status so Waived/Completed steps
    count as complete; the display variant also pulls names and date_waived.
    """
    columns = list(STAGE_INPUT_COLUMNS)
    if include_display:
        columns = ["user_id"] + DISPLAY_COLUMNS + columns[1:]
    if table == 'candidate_checklist_items':
        columns.append("step_status")
        if include_display:
            columns.append("date_waived")
    return columns

def load_checklist_rows(user_id: Optional[int] = None, client=None,
                        include_display: bool = False) -> List[Dict[str, Any]]:
    """
    Load checklist rows from BigQuery, for one user or for everyone.

    Args:
        user_id: Restrict to this user; None loads every row
        client: BigQuery client (a new one is created if not provided)
        include_display: Also select name/display columns

    Returns:
        list: Rows as dicts, in table iteration order
    """
    logger = logging.getLogger('checklist.store')

    table = get_checklist_table()
    full_table = get_table_reference(table)
    columns = ", ".join(get_select_columns(table, include_display))

    query = f"SELECT {columns} FROM `{full_table}`"
    job_config = None
    if user_id is not None:
        query += " WHERE user_id = @user_id"
        job_config = bigquery.QueryJobConfig(
            query_parameters=[
                bigquery.ScalarQueryParameter("user_id", "INT64", user_id)
            ]
        )

    logger.info(f"🔍 Loading checklist rows from {full_table}" + (f" for user {user_id}" if user_id is not None else ""))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Query: {query}")

    start_time = datetime.utcnow()
    client = client or get_bigquery_client()

    try:
        job = client.query(query, job_config=job_config)
        rows = [dict(row.items()) for row in job.result()]
    except GoogleAPIError as e:
        logger.error(f"❌ Failed to load checklist rows from {full_table}: {e}", exc_info=True)
        raise

    elapsed = (datetime.utcnow() - start_time).total_seconds()
    logger.info(f"📊 Loaded {len(rows)} checklist rows in {elapsed:.2f}s")
    return rows

def get_stage_and_substage_for_user(user_id: int, client=None) -> StageResult:
    """Read one user's checklist rows and return their stage + substage."""
    rows = load_checklist_rows(user_id=user_id, client=client)
    view = aggregate(rows).get(user_id)
    if view is None:
        return StageResult(stage=None, substage=None)
    return classify(view)

def get_stage_and_substage_for_all_users(client=None) -> Dict[int, StageResult]:
    """Read every checklist row and return stage + substage per user id."""
    logger = logging.getLogger('checklist.store')

    rows = load_checklist_rows(client=client)
    views = aggregate(rows)
    results = dict(classify_all(views))

    logger.info(f"✅ Classified {len(results)} users from {len(rows)} checklist rows")
    return results

def get_breakdown_for_user(user_id: int, client=None) -> Dict[str, Any]:
    """
    Checklist rows, aggregated view and stage breakdown for one user.

    Args:
        user_id: Blackbaud user id
        client: BigQuery client (a new one is created if not provided)

    Returns:
        dict: JSON-serialisable lookup result
    """
    rows = load_checklist_rows(user_id=user_id, client=client, include_display=True)
    serialisable_rows = [
        {key: value.isoformat() if hasattr(value, 'isoformat') else value for key, value in row.items()}
        for row in rows
    ]

    result = {
        "user_id": user_id,
        "checklist_table": get_checklist_table(),
        "checklist_rows": serialisable_rows,
    }

    view = aggregate(rows).get(user_id)
    if view is None:
        result.update({
            "message": "No checklist data found for this user.",
            "person_view": None,
            "breakdown": None,
        })
        return result

    result.update({
        "first_name": rows[0].get("first_name"),
        "last_name": rows[0].get("last_name"),
        "person_view": view.to_dict(),
        "breakdown": classify_with_breakdown(view).to_dict(),
    })
    return result
