# tests/test_static_contracts.py

import ast
import inspect
from pathlib import Path

import pytest

import checklist_pipeline.schema as schema_mod
import checklist_pipeline.checklist_stages.config as config_mod

PACKAGE_ROOT = Path(__file__).resolve().parents[1] / "src" / "checklist_pipeline"

# ——————————————————————————————————————————————————————————————
# 1) Dynamically build allowed sets from the definition modules
# ——————————————————————————————————————————————————————————————

def _schema_columns(name):
    return [col for col, _ in getattr(schema_mod, name)]

def _getenv_keys(tree):
    """Yield (key, lineno) for every os.getenv("KEY") call in a module tree"""
    for node in ast.walk(tree):
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Attribute)
            and isinstance(node.func.value, ast.Name)
            and node.func.value.id == "os"
            and node.func.attr == "getenv"
            and node.args
        ):
            arg = node.args[0]
            if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
                yield arg.value, node.lineno

allowed_env_keys = {key for key, _ in _getenv_keys(ast.parse(inspect.getsource(config_mod)))}

# ——————————————————————————————————————————————————————————————
# 2) Contracts
# ——————————————————————————————————————————————————————————————

def test_env_vars_are_only_read_in_config():
    modules = [p for p in PACKAGE_ROOT.rglob("*.py") if p.name != "config.py"]
    assert modules

    for path in modules:
        tree = ast.parse(path.read_text(encoding="utf8"), str(path))
        for key, lineno in _getenv_keys(tree):
            pytest.fail(
                f"os.getenv({key!r}) in {path}:{lineno}; "
                "move getenv into checklist_stages/config.py"
            )

def test_config_reads_known_env_vars():
    assert {"BIGQUERY_PROJECT_ID", "BIGQUERY_DATASET_ID", "CHECKLIST_TABLE", "LOG_LEVEL"} <= allowed_env_keys

def test_stage_input_columns_exist_in_both_tables():
    checklist_cols = set(_schema_columns("SCHEMA_CHECKLIST_ITEMS"))
    candidate_cols = set(_schema_columns("SCHEMA_CANDIDATE_CHECKLIST_ITEMS"))

    assert set(schema_mod.STAGE_INPUT_COLUMNS) <= checklist_cols
    assert checklist_cols <= candidate_cols
    assert "step_status" in candidate_cols - checklist_cols

def test_field_map_covers_schema():
    assert set(schema_mod.BLACKBAUD_CHECKLIST_FIELD_MAP) == set(_schema_columns("SCHEMA_CANDIDATE_CHECKLIST_ITEMS"))
