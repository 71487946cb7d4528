# src/checklist_pipeline/checklist_stages/models.py
"""
Data models for checklist aggregation and stage classification
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from checklist_pipeline.checklist_ingest.normalization import (
    to_date,
    to_person_id,
    to_str,
)

class Stage(str, Enum):
    """HubSpot deal stages, valued with the exact spelling HubSpot expects"""
    APPLICATION = "Application"
    DECISION = "Decision"
    CONTRACT_SENT = "Contract Sent"
    CLOSED_WON = "Closed Won"
    CLOSED_LOST = "Closed Lost"

class ItemState(str, Enum):
    REQUESTED = "requested"
    COMPLETE = "complete"

# step_status values that count as complete without a completion date
COMPLETE_STEP_STATUSES = {"Completed", "Waived"}

# Store column name -> fact field name, for rows read from checklist tables
ROW_FIELD_ALIASES: Dict[str, str] = {
    "user_id": "person_id",
    "checklist_item": "item_name",
    "date_completed": "completed_on",
    "date_requested": "requested_on",
}

def _pick(row: Mapping[str, Any], name: str) -> Any:
    value = row.get(name)
    if value is not None:
        return value
    for alias, target in ROW_FIELD_ALIASES.items():
        if target == name and row.get(alias) is not None:
            return row.get(alias)
    return None

@dataclass
class RawChecklistFact:
    """One observation about one person at one checklist step"""
    person_id: Optional[int]
    checklist_name: Optional[str] = None
    item_name: Optional[str] = None
    completed_on: Optional[str] = None
    requested_on: Optional[str] = None
    step_status: Optional[str] = None
    candidate_decision: Optional[str] = None
    school_decision: Optional[str] = None
    reason_declined: Optional[str] = None
    inactive: Optional[Any] = None
    contract_publish_date: Optional[str] = None
    contract_return_date: Optional[str] = None
    contract_dep_rec_date: Optional[str] = None
    test_no_show: Optional[Any] = None
    test_short_description: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RawChecklistFact":
        """
        Build a fact from a dict row, coercing malformed scalars to None.

        Accepts both checklist table column names (user_id, checklist_item,
        date_completed, date_requested) and the fact field names.
        """
        return cls(
            person_id=to_person_id(_pick(row, "person_id")),
            checklist_name=to_str(_pick(row, "checklist_name")),
            item_name=to_str(_pick(row, "item_name")),
            completed_on=to_date(_pick(row, "completed_on")),
            requested_on=to_date(_pick(row, "requested_on")),
            step_status=to_str(_pick(row, "step_status")),
            candidate_decision=to_str(_pick(row, "candidate_decision")),
            school_decision=to_str(_pick(row, "school_decision")),
            reason_declined=to_str(_pick(row, "reason_declined")),
            inactive=_pick(row, "inactive"),
            contract_publish_date=to_date(_pick(row, "contract_publish_date")),
            contract_return_date=to_date(_pick(row, "contract_return_date")),
            contract_dep_rec_date=to_date(_pick(row, "contract_dep_rec_date")),
            test_no_show=_pick(row, "test_no_show"),
            test_short_description=to_str(_pick(row, "test_short_description")),
        )

    @property
    def counts_as_complete(self) -> bool:
        return bool(self.completed_on) or (self.step_status or "").strip() in COMPLETE_STEP_STATUSES

@dataclass
class ItemStatus:
    name: str
    status: ItemState

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "status": self.status.value}

@dataclass
class PersonView:
    """Canonical per-person snapshot folded from all of a person's checklist facts"""
    person_id: int
    checklist_completion: Dict[str, bool] = field(default_factory=dict)
    item_status: List[ItemStatus] = field(default_factory=list)
    test_no_show: bool = False
    test_short_description: Optional[str] = None
    candidate_decision: Optional[str] = None
    school_decision: Optional[str] = None
    inactive: bool = False
    contract_publish_date: Optional[str] = None
    contract_return_date: Optional[str] = None
    contract_dep_rec_date: Optional[str] = None

    def is_completed(self, label: str) -> bool:
        return bool(self.checklist_completion.get(label))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "person_id": self.person_id,
            "checklist_completion": dict(self.checklist_completion),
            "item_status": [item.to_dict() for item in self.item_status],
            "test_no_show": self.test_no_show,
            "test_short_description": self.test_short_description,
            "candidate_decision": self.candidate_decision,
            "school_decision": self.school_decision,
            "inactive": self.inactive,
            "contract_publish_date": self.contract_publish_date,
            "contract_return_date": self.contract_return_date,
            "contract_dep_rec_date": self.contract_dep_rec_date,
        }

@dataclass(frozen=True)
class StageResult:
    stage: Optional[Stage]
    substage: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value if self.stage else None,
            "substage": self.substage,
        }

@dataclass(frozen=True)
class StageBreakdown:
    """Stage result plus the label and the reasons behind the winning rules"""
    stage: Optional[Stage]
    substage: Optional[int]
    substage_label: Optional[str]
    stage_reason: Optional[str]
    substage_reason: Optional[str]

    @property
    def result(self) -> StageResult:
        return StageResult(stage=self.stage, substage=self.substage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value if self.stage else None,
            "substage": self.substage,
            "substage_label": self.substage_label,
            "stage_reason": self.stage_reason,
            "substage_reason": self.substage_reason,
        }
