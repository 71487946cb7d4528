# src/checklist_pipeline/checklist_stages/__init__.py

"""
Stage/substage engine for admissions checklist data.

This package turns checklist rows into HubSpot deal stages:
- Aggregation of raw checklist facts into one view per person
- Ordered stage and substage rules with human-readable reasons
- BigQuery loading of checklist rows for one user or all users
- Event-style entry point returning a processing summary

Aggregation and classification are pure; only store.py does I/O.
"""

from .models import (
    Stage,
    ItemState,
    ItemStatus,
    RawChecklistFact,
    PersonView,
    StageResult,
    StageBreakdown,
)
from .aggregator import aggregate, apply_fact
from .classifier import (
    SUBSTAGE_LABELS,
    classify,
    classify_all,
    classify_stage,
    classify_substage,
    classify_with_breakdown,
    find_item_status,
    substage_label,
)
from .config import init_env, get_config, validate_config, get_checklist_table
from .main import process_stages_event

__all__ = [
    # Models
    "Stage",
    "ItemState",
    "ItemStatus",
    "RawChecklistFact",
    "PersonView",
    "StageResult",
    "StageBreakdown",

    # Aggregation
    "aggregate",
    "apply_fact",

    # Classification
    "SUBSTAGE_LABELS",
    "classify",
    "classify_all",
    "classify_stage",
    "classify_substage",
    "classify_with_breakdown",
    "find_item_status",
    "substage_label",

    # Configuration
    "init_env",
    "get_config",
    "validate_config",
    "get_checklist_table",

    # Main entry point
    "process_stages_event",
]
