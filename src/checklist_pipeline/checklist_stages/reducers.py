# src/checklist_pipeline/checklist_stages/reducers.py
"""
Field reduction strategies used when folding checklist facts into a PersonView.

Each PersonView field is reduced with exactly one named strategy:

- LastNonNull: later non-null values overwrite, a later null never erases
- OrSticky:    boolean OR; once true, stays true
- UnionMap:    label -> True for every label seen on a completed fact
- UpgradeOnly: per-name item status, requested may become complete, never back
"""

from typing import Any, Dict, Iterable, List, Optional

from checklist_pipeline.checklist_ingest.normalization import is_truthy
from .models import ItemState, ItemStatus

class LastNonNull:
    name = "last_non_null"

    def initial(self) -> Any:
        return None

    def reduce(self, current: Any, value: Any) -> Any:
        if value is None or value == "":
            return current
        return value

class OrSticky:
    name = "or_sticky"

    def initial(self) -> bool:
        return False

    def reduce(self, current: bool, value: Any) -> bool:
        return current or is_truthy(value)

class UnionMap:
    name = "union_map"

    def initial(self) -> Dict[str, bool]:
        return {}

    def reduce(self, current: Dict[str, bool], labels: Iterable[str]) -> Dict[str, bool]:
        for label in labels:
            if label:
                current[label] = True
        return current

class UpgradeOnly:
    name = "upgrade_only"

    def initial(self) -> List[ItemStatus]:
        return []

    def reduce(self, current: List[ItemStatus], name: Optional[str],
               status: Optional[ItemState]) -> List[ItemStatus]:
        if not name or status is None:
            return current
        for item in current:
            if item.name == name:
                if status == ItemState.COMPLETE:
                    item.status = ItemState.COMPLETE
                return current
        current.append(ItemStatus(name=name, status=status))
        return current

LAST_NON_NULL = LastNonNull()
OR_STICKY = OrSticky()
UNION_MAP = UnionMap()
UPGRADE_ONLY = UpgradeOnly()

# PersonView scalar field -> reducer; the fact carries a field of the same name
SCALAR_FIELD_REDUCERS = {
    "candidate_decision": LAST_NON_NULL,
    "school_decision": LAST_NON_NULL,
    "contract_publish_date": LAST_NON_NULL,
    "contract_return_date": LAST_NON_NULL,
    "contract_dep_rec_date": LAST_NON_NULL,
    "test_short_description": LAST_NON_NULL,
    "inactive": OR_STICKY,
    "test_no_show": OR_STICKY,
}
