# src/checklist_pipeline/checklist_stages/aggregator.py

import logging
from dataclasses import asdict
from typing import Any, Dict, Iterable, Mapping, Union

from checklist_pipeline.checklist_ingest.normalization import normalize_label
from .models import ItemState, PersonView, RawChecklistFact
from .reducers import SCALAR_FIELD_REDUCERS, UNION_MAP, UPGRADE_ONLY

FactLike = Union[RawChecklistFact, Mapping[str, Any]]

def _as_fact(record: FactLike) -> RawChecklistFact:
    # Instances get the same coercion as rows so "7" and 7 are one person
    if isinstance(record, RawChecklistFact):
        record = asdict(record)
    return RawChecklistFact.from_row(record)

def _new_view(person_id: int) -> PersonView:
    view = PersonView(person_id=person_id)
    view.checklist_completion = UNION_MAP.initial()
    view.item_status = UPGRADE_ONLY.initial()
    for field_name, reducer in SCALAR_FIELD_REDUCERS.items():
        setattr(view, field_name, reducer.initial())
    return view

def _item_state(fact: RawChecklistFact):
    if fact.counts_as_complete:
        return ItemState.COMPLETE
    if fact.requested_on:
        return ItemState.REQUESTED
    return None

def apply_fact(view: PersonView, fact: RawChecklistFact) -> PersonView:
    """Fold one fact into a person's view using each field's reducer."""
    checklist_name = normalize_label(fact.checklist_name)
    item_name = normalize_label(fact.item_name)

    # Checklist and item names share one completion map so stage rules match
    # whichever labelling scheme the source used
    if fact.counts_as_complete:
        view.checklist_completion = UNION_MAP.reduce(
            view.checklist_completion, (checklist_name, item_name)
        )

    view.item_status = UPGRADE_ONLY.reduce(view.item_status, item_name, _item_state(fact))

    for field_name, reducer in SCALAR_FIELD_REDUCERS.items():
        current = getattr(view, field_name)
        setattr(view, field_name, reducer.reduce(current, getattr(fact, field_name)))

    return view

def aggregate(facts: Iterable[FactLike]) -> Dict[int, PersonView]:
    """
    Fold checklist facts into one PersonView per person.

    Facts are processed in the order given; only the last-non-null fields
    depend on that order. Facts without an attributable person id are
    skipped.

    Args:
        facts: RawChecklistFact instances or dict rows from a checklist table

    Returns:
        dict: person_id -> PersonView, in first-seen order
    """
    logger = logging.getLogger('checklist.stages.aggregator')

    views: Dict[int, PersonView] = {}
    total = 0
    skipped = 0

    for record in facts:
        total += 1
        fact = _as_fact(record)
        if fact.person_id is None:
            skipped += 1
            continue

        view = views.get(fact.person_id)
        if view is None:
            view = _new_view(fact.person_id)
            views[fact.person_id] = view

        apply_fact(view, fact)

    if skipped:
        logger.debug(f"Skipped {skipped} of {total} facts without a person id")
    logger.debug(f"Aggregated {total - skipped} facts into {len(views)} person views")

    return views
