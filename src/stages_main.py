# ===============================================================================
# src/stages_main.py - Stage lookup Cloud Function (HTTP)
# ===============================================================================

import logging
import re
from datetime import datetime
import functions_framework
from flask import Request

USER_PATH_PATTERN = re.compile(r'^/api/user/([^/]+)/?$')

def _parse_user_id(raw):
    """Blackbaud user ids are non-negative integers given as ASCII digits"""
    if raw is None:
        return None
    raw = str(raw).strip()
    if not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw)

@functions_framework.http
def main(request: Request):
    """
    Stage lookup Cloud Function entry point

    Routes:
        GET /api/user/<user_id> or /?user_id=<user_id> - breakdown for one user
        GET /api/stages                                 - compute stages for all users

    Args:
        request: Flask Request object containing HTTP request data

    Returns:
        tuple: (response_data, status_code)
    """
    logger = logging.getLogger('checklist.stages.cloudfunction')
    logger.info(f"🌐 Stage lookup HTTP trigger received: {request.method} {request.path}")

    if request.method != 'GET':
        return {"error": "Method not allowed"}, 405

    match = USER_PATH_PATTERN.match(request.path or '')
    raw_user_id = match.group(1) if match else request.args.get('user_id')

    if raw_user_id is not None:
        user_id = _parse_user_id(raw_user_id)
        if user_id is None:
            logger.warning(f"⚠️ Invalid user_id in request: {raw_user_id!r}")
            return {"error": "Invalid user_id"}, 400
        return lookup_user(user_id, logger)

    if request.path in ('/api/stages', '/api/stages/'):
        return run_all_stages(request, logger)

    return {"error": "Not found"}, 404

def lookup_user(user_id: int, logger) -> tuple:
    """Checklist rows, person view and breakdown for one user"""
    try:
        from checklist_pipeline.checklist_stages.config import init_env
        from checklist_pipeline.checklist_stages.store import get_breakdown_for_user

        init_env(log_level='INFO')
        data = get_breakdown_for_user(user_id)

        breakdown = data.get('breakdown') or {}
        logger.info(f"✅ User {user_id}: stage={breakdown.get('stage')}, substage={breakdown.get('substage')}")
        return data, 200

    except Exception as e:
        logger.error(f"❌ Stage lookup failed for user {user_id}: {e}", exc_info=True)
        return {
            "error": str(e),
            "user_id": user_id,
            "timestamp": datetime.utcnow().isoformat()
        }, 500

def run_all_stages(request: Request, logger) -> tuple:
    """Compute stages for every user and return the run summary"""
    from checklist_pipeline.checklist_stages.config import init_env
    from checklist_pipeline.checklist_stages.main import process_stages_event

    log_level = request.args.get('log_level') or 'INFO'
    try:
        init_env(log_level=log_level)
    except Exception as e:
        logger.error(f"❌ Failed to initialize environment: {e}", exc_info=True)
        return {"status": "error", "error": f"Configuration error: {e}"}, 500

    result = process_stages_event({})
    status_code = 200 if result.get('status') == 'success' else 500

    logger.info(f"🎉 Stage run completed with status: {result.get('status')}")
    return result, status_code
