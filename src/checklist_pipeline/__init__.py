# src/checklist_pipeline/__init__.py
"""
Checklist pipeline package exports.
"""

# ─── Stage Engine (checklist_stages) ──────────────────────────────────────────
from .checklist_stages import (
    Stage,
    RawChecklistFact,
    PersonView,
    StageResult,
    StageBreakdown,
    aggregate,
    classify,
    classify_stage,
    classify_substage,
    classify_with_breakdown,
    process_stages_event,
)

# ─── Payload Mapping (checklist_ingest) ───────────────────────────────────────
from .checklist_ingest import map_item_to_checklist, map_candidate_to_checklist_rows

# ─── Schema Definitions & Field Maps ──────────────────────────────────────────
from .schema import (
    SCHEMA_CHECKLIST_ITEMS,
    SCHEMA_CANDIDATE_CHECKLIST_ITEMS,
    BLACKBAUD_CHECKLIST_FIELD_MAP,
)

__all__ = [
    # Stage engine
    "Stage",
    "RawChecklistFact",
    "PersonView",
    "StageResult",
    "StageBreakdown",
    "aggregate",
    "classify",
    "classify_stage",
    "classify_substage",
    "classify_with_breakdown",
    "process_stages_event",
    # Payload mapping
    "map_item_to_checklist",
    "map_candidate_to_checklist_rows",
    # Schemas & maps
    "SCHEMA_CHECKLIST_ITEMS",
    "SCHEMA_CANDIDATE_CHECKLIST_ITEMS",
    "BLACKBAUD_CHECKLIST_FIELD_MAP",
]
