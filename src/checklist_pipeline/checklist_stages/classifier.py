# src/checklist_pipeline/checklist_stages/classifier.py

import logging
from typing import Callable, List, NamedTuple, Optional, Tuple

from checklist_pipeline.checklist_ingest.normalization import is_set, normalize_label
from .models import ItemState, PersonView, Stage, StageBreakdown, StageResult

# ─── Checklist labels ─────────────────────────────────────────────────────────────
APPLICATION_FORM = "Application Form"
DECISION = "Decision"
ENROLLMENT_CONTRACT_RECEIVED = "Enrollment Contract Received"
FAIRMONT_ADMISSIONS_ASSESSMENT = "Fairmont Admissions Assessment"
FAIRMONT_ADMISSIONS_RE_ASSESSMENT = "Fairmont Admissions Re-Assessment"

# ─── Decision values ──────────────────────────────────────────────────────────────
CANDIDATE_DECLINED = "I Decline"
SCHOOL_DENIED = "Denied"
SCHOOL_WAITLIST_DEPOSIT_PAID = "Waitlist w/ Deposit Paid"
SCHOOL_ACCEPTED_WITH_CONDITIONS = "Accepted w/ Conditions"
SCHOOL_ACCEPTED = "Accepted"
SCHOOL_WAITLIST = "Waitlist"

SUBSTAGE_LABELS = {
    13: "Application sent",
    14: "Application received",
    15: "Assessment scheduled",
    16: "Assessment no show",
    17: "Assessment completed",
    18: "Re-assessment required",
    19: "Re-assessment no show",
    20: "Re-assessment completed",
    21: "Waiting list application",
    22: "Documents missing",
    23: "Offer sent",
    24: "Conditional offer sent",
    25: "Offer accepted (pending payment)",
    26: "Waiting list offer accepted",
    27: "Enrolled",
    28: "Recyclable",
}

class StageRule(NamedTuple):
    stage: Stage
    applies: Callable[[PersonView], bool]
    reason: str

class SubstageRule(NamedTuple):
    substage: int
    applies: Callable[[PersonView], bool]
    reason: str

def find_item_status(view: PersonView, label: str) -> Optional[ItemState]:
    """
    Status of the first item whose name matches the label.

    A name matches when it equals the label, contains it, or is contained in
    it. Items are searched in insertion order, so with several fuzzy matches
    the earliest-seen item wins.
    """
    for item in view.item_status:
        if item.name == label or label in item.name or item.name in label:
            return item.status
    return None

def _candidate_decision(view: PersonView) -> str:
    return normalize_label(view.candidate_decision)

def _school_decision(view: PersonView) -> str:
    return normalize_label(view.school_decision)

def _test_description(view: PersonView) -> str:
    return normalize_label(view.test_short_description)

def _is_closed_lost(view: PersonView) -> bool:
    return (
        view.inactive
        or _candidate_decision(view) == CANDIDATE_DECLINED
        or _school_decision(view) == SCHOOL_DENIED
    )

def _item_is(label: str, state: ItemState) -> Callable[[PersonView], bool]:
    return lambda view: find_item_status(view, label) == state

def _school_decision_is(value: str) -> Callable[[PersonView], bool]:
    return lambda view: _school_decision(view) == value

# First match wins; Closed Lost guards come before Closed Won
STAGE_RULES: List[StageRule] = [
    StageRule(Stage.CLOSED_LOST, lambda view: view.inactive,
              "inactive is true"),
    StageRule(Stage.CLOSED_LOST, lambda view: _candidate_decision(view) == CANDIDATE_DECLINED,
              f"candidate_decision = '{CANDIDATE_DECLINED}'"),
    StageRule(Stage.CLOSED_LOST, lambda view: _school_decision(view) == SCHOOL_DENIED,
              f"school_decision = '{SCHOOL_DENIED}'"),
    StageRule(Stage.CLOSED_WON, lambda view: view.is_completed(ENROLLMENT_CONTRACT_RECEIVED),
              f"checklist '{ENROLLMENT_CONTRACT_RECEIVED}' has at least one item completed"),
    StageRule(Stage.CONTRACT_SENT, lambda view: is_set(view.contract_publish_date),
              "contract_publish_date is set"),
    StageRule(Stage.DECISION, lambda view: view.is_completed(DECISION),
              f"checklist '{DECISION}' has at least one item completed"),
    StageRule(Stage.APPLICATION, lambda view: view.is_completed(APPLICATION_FORM),
              f"checklist '{APPLICATION_FORM}' has at least one item completed"),
]

# Most advanced substage first; first match wins. 13 is set by hand in
# HubSpot and 22 has no derivation rule, so neither appears here.
SUBSTAGE_RULES: List[SubstageRule] = [
    SubstageRule(28, _is_closed_lost,
                 "inactive, or candidate_decision = I Decline, or school_decision = Denied"),
    SubstageRule(27, lambda view: view.is_completed(ENROLLMENT_CONTRACT_RECEIVED),
                 f"checklist '{ENROLLMENT_CONTRACT_RECEIVED}' completed"),
    SubstageRule(26, _school_decision_is(SCHOOL_WAITLIST_DEPOSIT_PAID),
                 f"school_decision = '{SCHOOL_WAITLIST_DEPOSIT_PAID}'"),
    SubstageRule(25, lambda view: (
                     not view.is_completed(ENROLLMENT_CONTRACT_RECEIVED)
                     and is_set(view.contract_return_date)
                     and not is_set(view.contract_dep_rec_date)
                 ),
                 "Enrollment Contract not complete, contract_return_date set, contract_dep_rec_date not set"),
    SubstageRule(24, _school_decision_is(SCHOOL_ACCEPTED_WITH_CONDITIONS),
                 f"school_decision = '{SCHOOL_ACCEPTED_WITH_CONDITIONS}'"),
    SubstageRule(23, _school_decision_is(SCHOOL_ACCEPTED),
                 f"school_decision = '{SCHOOL_ACCEPTED}'"),
    SubstageRule(21, _school_decision_is(SCHOOL_WAITLIST),
                 f"school_decision = '{SCHOOL_WAITLIST}'"),
    SubstageRule(20, _item_is(FAIRMONT_ADMISSIONS_RE_ASSESSMENT, ItemState.COMPLETE),
                 f"checklist item '{FAIRMONT_ADMISSIONS_RE_ASSESSMENT}' = complete"),
    SubstageRule(19, lambda view: view.test_no_show and "Re-Assessment" in _test_description(view),
                 "test_no_show true and test_short_description contains Re-Assessment"),
    SubstageRule(18, _item_is(FAIRMONT_ADMISSIONS_RE_ASSESSMENT, ItemState.REQUESTED),
                 f"checklist item '{FAIRMONT_ADMISSIONS_RE_ASSESSMENT}' = requested"),
    SubstageRule(17, _item_is(FAIRMONT_ADMISSIONS_ASSESSMENT, ItemState.COMPLETE),
                 f"checklist item '{FAIRMONT_ADMISSIONS_ASSESSMENT}' = complete"),
    SubstageRule(16, lambda view: (
                     view.test_no_show
                     and "Assessment" in _test_description(view)
                     and "Re-Assessment" not in _test_description(view)
                 ),
                 f"test_no_show true and test_short_description is {FAIRMONT_ADMISSIONS_ASSESSMENT}"),
    SubstageRule(15, _item_is(FAIRMONT_ADMISSIONS_ASSESSMENT, ItemState.REQUESTED),
                 f"checklist item '{FAIRMONT_ADMISSIONS_ASSESSMENT}' = requested"),
    SubstageRule(14, lambda view: view.is_completed(APPLICATION_FORM),
                 f"checklist '{APPLICATION_FORM}' has at least one item completed"),
]

def _first_stage_rule(view: PersonView) -> Optional[StageRule]:
    for rule in STAGE_RULES:
        if rule.applies(view):
            return rule
    return None

def _first_substage_rule(view: PersonView) -> Optional[SubstageRule]:
    for rule in SUBSTAGE_RULES:
        if rule.applies(view):
            return rule
    return None

def classify_stage(view: PersonView) -> Optional[Stage]:
    """Deal stage for a person view, or None when no stage can be determined yet."""
    rule = _first_stage_rule(view)
    return rule.stage if rule else None

def classify_substage(view: PersonView) -> Optional[int]:
    """Substage code (14..28) for a person view, or None when no rule matches."""
    rule = _first_substage_rule(view)
    return rule.substage if rule else None

def classify(view: PersonView) -> StageResult:
    return StageResult(stage=classify_stage(view), substage=classify_substage(view))

def substage_label(substage: Optional[int]) -> Optional[str]:
    if substage is None:
        return None
    return SUBSTAGE_LABELS.get(substage, f"Substage {substage}")

def classify_with_breakdown(view: PersonView) -> StageBreakdown:
    """
    Stage and substage together with the reason behind each winning rule.

    Args:
        view: Aggregated person view

    Returns:
        StageBreakdown: stage, substage, substage label and reason strings
    """
    logger = logging.getLogger('checklist.stages.classifier')

    stage_rule = _first_stage_rule(view)
    substage_rule = _first_substage_rule(view)

    breakdown = StageBreakdown(
        stage=stage_rule.stage if stage_rule else None,
        substage=substage_rule.substage if substage_rule else None,
        substage_label=substage_label(substage_rule.substage) if substage_rule else None,
        stage_reason=stage_rule.reason if stage_rule else None,
        substage_reason=substage_rule.reason if substage_rule else None,
    )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            f"Person {view.person_id}: stage={breakdown.stage} ({breakdown.stage_reason}), "
            f"substage={breakdown.substage} ({breakdown.substage_reason})"
        )

    return breakdown

def classify_all(views) -> List[Tuple[int, StageResult]]:
    """Classify every view of an aggregate() result, keeping its order."""
    return [(person_id, classify(view)) for person_id, view in views.items()]
