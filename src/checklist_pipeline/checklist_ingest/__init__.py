# src/checklist_pipeline/checklist_ingest/__init__.py

# Mapping of Blackbaud payloads into checklist rows, plus the scalar
# normalization shared with the stage engine
from .normalization import (
    to_str,
    to_num,
    to_date,
    to_person_id,
    is_truthy,
    is_set,
    normalize_label,
)
from .mapping import (
    get_field,
    map_item_to_checklist,
    map_candidate_to_checklist_rows,
)

__all__ = [
    # Scalar normalization
    "to_str",
    "to_num",
    "to_date",
    "to_person_id",
    "is_truthy",
    "is_set",
    "normalize_label",

    # Payload mapping
    "get_field",
    "map_item_to_checklist",
    "map_candidate_to_checklist_rows",
]
