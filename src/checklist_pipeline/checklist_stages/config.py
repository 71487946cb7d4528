# src/checklist_pipeline/checklist_stages/config.py

import os
import logging
import requests
from dotenv import load_dotenv

CHECKLIST_TABLE_OPTIONS = ('checklist_items', 'candidate_checklist_items')
DEFAULT_CHECKLIST_TABLE = 'checklist_items'

METADATA_URL = "http://metadata.google.internal/computeMetadata/v1"

def _metadata_get(path, timeout):
    return requests.get(f"{METADATA_URL}/{path}", headers={"Metadata-Flavor": "Google"}, timeout=timeout)

def is_running_in_gcp():
    """Detect if running in Google Cloud"""
    try:
        return _metadata_get("instance/zone", timeout=1).status_code == 200
    except requests.RequestException:
        return False

def get_environment():
    """Detect environment from Cloud Function name"""
    function_name = os.getenv('K_SERVICE', '')  # Cloud Run service name
    if 'prod' in function_name:
        return 'production'
    elif 'staging' in function_name:
        return 'staging'
    else:
        return 'development'

def get_project_id():
    """Get project ID from GCP metadata or environment"""
    logger = logging.getLogger('checklist.config')

    if not is_running_in_gcp():
        project_id = os.getenv("GOOGLE_CLOUD_PROJECT") or os.getenv("BIGQUERY_PROJECT_ID")
        if not project_id:
            raise RuntimeError("GOOGLE_CLOUD_PROJECT or BIGQUERY_PROJECT_ID must be set for local development")
        return project_id

    try:
        response = _metadata_get("project/project-id", timeout=5)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"❌ Failed to get project ID from metadata: {e}")
        raise RuntimeError("Failed to determine project ID from metadata server") from e

    logger.debug(f"Retrieved project ID from metadata: {response.text}")
    return response.text

def get_default_dataset(env):
    """Get default dataset name based on environment"""
    datasets = {
        'development': 'Admissions_dev',
        'staging': 'Admissions_staging',
        'production': 'Admissions_prod'
    }
    return datasets.get(env, 'Admissions_dev')

def get_checklist_table():
    """
    Checklist table the stage logic reads from.

    candidate_checklist_items holds Candidates API rows (with step_status);
    checklist_items holds the Advance list export. Unknown values fall back
    to checklist_items.
    """
    table = (os.getenv('CHECKLIST_TABLE') or '').strip()
    if table in CHECKLIST_TABLE_OPTIONS:
        return table
    if table:
        logging.getLogger('checklist.config').warning(
            f"⚠️ Unknown CHECKLIST_TABLE '{table}', using {DEFAULT_CHECKLIST_TABLE}"
        )
    return DEFAULT_CHECKLIST_TABLE

def get_table_reference(table_name, dataset=None):
    """Fully qualified BigQuery table reference: project.dataset.table"""
    project_id = os.getenv('BIGQUERY_PROJECT_ID')
    dataset_id = dataset or os.getenv('BIGQUERY_DATASET_ID')
    if not project_id or not dataset_id:
        raise RuntimeError("BIGQUERY_PROJECT_ID and BIGQUERY_DATASET_ID must be set")
    return f"{project_id}.{dataset_id}.{table_name}"

# Log level per environment when neither the caller nor LOG_LEVEL sets one
DEFAULT_LOG_LEVELS = {
    'development': 'DEBUG',
    'staging': 'INFO',
    'production': 'WARN',
}

def setup_logging(log_level=None):
    """
    Configure root logging for the stage pipeline.

    Precedence: log_level argument, then LOG_LEVEL, then the environment default.
    """
    env = get_environment()
    final_level = (log_level or os.getenv('LOG_LEVEL') or DEFAULT_LOG_LEVELS.get(env, 'INFO')).upper()

    logging.basicConfig(
        level=getattr(logging, final_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True
    )

    logger = logging.getLogger('checklist.config')
    logger.info(f"Logging configured - Environment: {env}, Level: {final_level}")
    return logger

def init_env(log_level=None):
    """
    Load .env, resolve the BigQuery project and default the dataset.

    Args:
        log_level (str, optional): Override log level for this session
    """
    logger = setup_logging(log_level)
    load_dotenv()

    env = get_environment()
    if is_running_in_gcp():
        os.environ["BIGQUERY_PROJECT_ID"] = get_project_id()
        logger.info(f"☁️ Running in GCP, project: {os.environ['BIGQUERY_PROJECT_ID']}")
    elif not os.getenv("BIGQUERY_PROJECT_ID"):
        logger.error("❌ BIGQUERY_PROJECT_ID is not set")
        raise RuntimeError("Missing required environment variables: ['BIGQUERY_PROJECT_ID']. Check your .env file.")

    if not os.getenv("BIGQUERY_DATASET_ID"):
        os.environ["BIGQUERY_DATASET_ID"] = get_default_dataset(env)
        logger.info(f"Using default dataset: {os.environ['BIGQUERY_DATASET_ID']}")

    logger.info(f"✅ Stage environment ready - {env}, table {get_checklist_table()}")
    return logger

def get_config():
    """Get configuration dictionary after init_env() has been called"""
    return {
        'BIGQUERY_PROJECT_ID': os.getenv('BIGQUERY_PROJECT_ID'),
        'BIGQUERY_DATASET_ID': os.getenv('BIGQUERY_DATASET_ID'),
        'GOOGLE_APPLICATION_CREDENTIALS': os.getenv('GOOGLE_APPLICATION_CREDENTIALS'),
        'CHECKLIST_TABLE': get_checklist_table(),
        'IS_GCP': is_running_in_gcp(),
        'ENVIRONMENT': get_environment(),
    }

def validate_config():
    """Validate that all required configuration is available for stage computation"""
    logger = logging.getLogger('checklist.config')
    config = get_config()
    required = ['BIGQUERY_PROJECT_ID', 'BIGQUERY_DATASET_ID']
    missing = [key for key in required if not config.get(key)]

    if missing:
        logger.error(f"Stage configuration validation failed. Missing: {missing}")
        raise RuntimeError(f"Stage configuration validation failed. Missing: {missing}")

    logger.info("Stage configuration validation passed")
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Validated stage configuration: {config}")

    return config
