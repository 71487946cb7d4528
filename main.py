# main.py

import sys
import json
import argparse
import logging

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s]: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    force=True  # Override any existing configuration
)

from checklist_pipeline.checklist_stages import aggregate, classify_with_breakdown

def get_environment_info():
    """Get current environment and dataset information"""
    try:
        from checklist_pipeline.checklist_stages.config import init_env, get_config

        init_env()
        config = get_config()

        return {
            'environment': config.get('ENVIRONMENT', 'unknown'),
            'dataset': config.get('BIGQUERY_DATASET_ID', 'unknown'),
            'project': config.get('BIGQUERY_PROJECT_ID', 'unknown'),
            'checklist_table': config.get('CHECKLIST_TABLE', 'unknown'),
        }
    except Exception as e:
        logging.error(f"Failed to get environment info: {e}")
        return None

def show_environment(env_info):
    print("\n" + "="*80)
    print("🌍 CURRENT ENVIRONMENT")
    print("="*80)
    print(f"Environment: {env_info['environment']}")
    print(f"Project: {env_info['project']}")
    print(f"Dataset: {env_info['dataset']}")
    print(f"Checklist table: {env_info['checklist_table']}")
    print("="*80)

def print_breakdown(person_id, view, breakdown):
    print(f"\n👤 User {person_id}")
    print("-" * 50)
    print(f"Stage:    {breakdown['stage']}  ({breakdown['stage_reason']})")
    print(f"Substage: {breakdown['substage']} {breakdown['substage_label'] or ''}  ({breakdown['substage_reason']})")
    if view:
        completed = sorted(label for label, done in view['checklist_completion'].items() if done)
        print(f"Completed checklists/items: {completed}")
        print(f"Item status: {view['item_status']}")

def classify_file(path):
    """Classify facts from a JSON file (a list of checklist rows) without BigQuery"""
    with open(path, 'r') as f:
        rows = json.load(f)

    if not isinstance(rows, list):
        print("❌ Expected a JSON list of checklist rows")
        return 1

    views = aggregate(rows)
    print(f"📊 {len(rows)} rows -> {len(views)} users")
    for person_id, view in views.items():
        print_breakdown(person_id, view.to_dict(), classify_with_breakdown(view).to_dict())
    return 0

def lookup_user(user_id):
    """Look up one user in BigQuery and print the breakdown"""
    env_info = get_environment_info()
    if env_info is None:
        return 1
    show_environment(env_info)

    from checklist_pipeline.checklist_stages.store import get_breakdown_for_user

    try:
        data = get_breakdown_for_user(user_id)
    except Exception as e:
        print(f"❌ Lookup failed: {e}")
        logging.error(f"Lookup failed: {e}", exc_info=True)
        return 1

    print(f"📋 {len(data['checklist_rows'])} checklist rows in {data['checklist_table']}")
    if data.get('breakdown') is None:
        print(f"ℹ️ {data['message']}")
        return 0

    print_breakdown(user_id, data['person_view'], data['breakdown'])
    return 0

def run_all():
    """Compute stages for every user and print the summary"""
    env_info = get_environment_info()
    if env_info is None:
        return 1
    show_environment(env_info)

    from checklist_pipeline.checklist_stages.main import process_stages_event

    result = process_stages_event({})
    print(json.dumps(result, indent=2))
    return 0 if result.get('status') == 'success' else 1

def main(argv=None):
    parser = argparse.ArgumentParser(description="Checklist stage/substage debugging tool")
    subparsers = parser.add_subparsers(dest="command", required=True)

    classify_parser = subparsers.add_parser("classify", help="Classify rows from a JSON file")
    classify_parser.add_argument("file", help="Path to a JSON list of checklist rows")

    lookup_parser = subparsers.add_parser("lookup", help="Look up one user in BigQuery")
    lookup_parser.add_argument("user_id", type=int, help="Blackbaud user id")

    subparsers.add_parser("run", help="Compute stages for all users in BigQuery")

    args = parser.parse_args(argv)

    if args.command == "classify":
        return classify_file(args.file)
    if args.command == "lookup":
        return lookup_user(args.user_id)
    return run_all()

if __name__ == "__main__":
    sys.exit(main())
