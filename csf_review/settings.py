from __future__ import annotations

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent
REPO_ROOT = PACKAGE_DIR.parent

ARTIFACTS_DIR = Path(os.environ.get("CSF_REVIEW_HOME", REPO_ROOT / "artifacts"))
UPLOADS_DIR = ARTIFACTS_DIR / "uploads"
EXPORTS_DIR = ARTIFACTS_DIR / "exports"
DB_PATH = ARTIFACTS_DIR / "csf_review.db"
DEFAULT_TEMPLATE_PATH = PACKAGE_DIR / "templates" / "csf_fields.json"

LOG_LEVEL = os.environ.get("CSF_REVIEW_LOG_LEVEL", "INFO").upper()


def ensure_runtime_dirs() -> None:
    for directory in (ARTIFACTS_DIR, UPLOADS_DIR, EXPORTS_DIR):
        directory.mkdir(parents=True, exist_ok=True)
