# src/checklist_pipeline/checklist_stages/main.py

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, Any, Optional

from checklist_pipeline.checklist_ingest.normalization import to_person_id
from .config import init_env, setup_logging, validate_config
from .store import get_stage_and_substage_for_all_users, get_stage_and_substage_for_user

def _parse_user_id(raw: Any) -> Optional[int]:
    if raw is None or raw == "":
        return None
    user_id = to_person_id(raw)
    if user_id is None or str(raw).strip() != str(user_id):
        raise ValueError(f"Invalid user_id: {raw!r}")
    return user_id

def process_stages_event(event_data: Dict[str, Any], client=None) -> Dict[str, Any]:
    """
    Compute deal stage and substage for one user or for every user

    Args:
        event_data: Parsed event data, may contain:
            - user_id: int/str - restrict to this Blackbaud user
            - log_level: str - override the log level for this run
        client: BigQuery client (optional)

    Returns:
        dict: Processing results
    """
    logger = logging.getLogger('checklist.stages')
    start_time = datetime.utcnow()

    try:
        if event_data.get('log_level'):
            setup_logging(log_level=event_data['log_level'])

        user_id = _parse_user_id(event_data.get('user_id'))

        config = validate_config()
        logger.info(f"✅ Configuration validated for environment: {config['ENVIRONMENT']}")
        logger.info(f"📋 Reading checklist table: {config['CHECKLIST_TABLE']}")

        if user_id is not None:
            logger.info(f"⚙️ Computing stage for user {user_id}")
            results = {user_id: get_stage_and_substage_for_user(user_id, client=client)}
        else:
            logger.info("⚙️ Computing stages for all users")
            results = get_stage_and_substage_for_all_users(client=client)

        stage_counts = Counter(
            result.stage.value if result.stage else "undetermined" for result in results.values()
        )
        substage_counts = Counter(
            str(result.substage) if result.substage is not None else "undetermined"
            for result in results.values()
        )

        total_time = (datetime.utcnow() - start_time).total_seconds()

        result = {
            "status": "success",
            "users": len(results),
            "stage_counts": dict(stage_counts),
            "substage_counts": dict(substage_counts),
            "processing_time_seconds": total_time,
            "timestamp": datetime.utcnow().isoformat(),
        }
        if user_id is not None:
            result["user_id"] = user_id
            result["result"] = results[user_id].to_dict()

        logger.info(f"🎉 Stage computation completed for {len(results)} users")
        logger.info(f"📊 Stage counts: {dict(stage_counts)}")
        return result

    except Exception as e:
        total_time = (datetime.utcnow() - start_time).total_seconds()
        error_msg = str(e)

        logger.error(f"❌ Stage computation failed: {error_msg}", exc_info=True)

        return {
            "status": "error",
            "error": error_msg,
            "processing_time_seconds": total_time,
            "timestamp": datetime.utcnow().isoformat(),
        }


if __name__ == "__main__":
    # For standalone testing
    init_env()
    result = process_stages_event({})
    print(f"Result: {result}")
