"""
Settings API - Read/write ingestion preferences.

Settings are stored in the app_settings DB table. When reading a value,
the DB is checked first; if no row exists, the corresponding environment
variable (from .env) is used as fallback, then the built-in default.

Endpoints:
- GET  /api/settings           - All settings with their source
- POST /api/settings           - Save one or more settings
"""

import os
import logging
from typing import Dict, Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import AppSetting

logger = logging.getLogger(__name__)
router = APIRouter()

# Map of setting key -> env var name for fallback
SETTING_ENV_MAP = {
    "default_category": "DEFAULT_CATEGORY",
    "max_upload_mb": "MAX_UPLOAD_MB",
}

SETTING_DEFAULTS = {
    "default_category": "Uncategorized",
    "max_upload_mb": "10",
}

INTEGER_SETTINGS = {"max_upload_mb"}


def get_setting(key: str, db: Session) -> Optional[str]:
    """Get a setting value: DB first, then .env fallback, then default."""
    row = db.query(AppSetting).filter(AppSetting.key == key).first()
    if row and row.value:
        return row.value
    env_var = SETTING_ENV_MAP.get(key)
    if env_var and os.getenv(env_var):
        return os.getenv(env_var)
    return SETTING_DEFAULTS.get(key)


def get_int_setting(key: str, db: Session) -> int:
    raw = get_setting(key, db)
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Setting {key}={raw!r} is not an integer, using default")
        return int(SETTING_DEFAULTS[key])


def _get_source(key: str, db: Session) -> str:
    """Where is this setting coming from?"""
    row = db.query(AppSetting).filter(AppSetting.key == key).first()
    if row and row.value:
        return "database"
    env_var = SETTING_ENV_MAP.get(key)
    if env_var and os.getenv(env_var):
        return "env"
    return "default"


class SettingsUpdate(BaseModel):
    settings: Dict[str, str]


@router.get("/")
def get_settings(db: Session = Depends(get_db)):
    """Return all settings and where each value comes from."""
    return {
        key: {"value": get_setting(key, db), "source": _get_source(key, db)}
        for key in SETTING_ENV_MAP
    }


@router.post("/")
def save_settings(req: SettingsUpdate, db: Session = Depends(get_db)):
    """Save one or more settings to the database."""
    updated = []
    for key, value in req.settings.items():
        if key not in SETTING_ENV_MAP:
            continue  # Ignore unknown keys

        if key in INTEGER_SETTINGS and not value.strip().isdigit():
            raise HTTPException(status_code=400, detail=f"{key} must be a whole number")

        row = db.query(AppSetting).filter(AppSetting.key == key).first()
        if row:
            row.value = value
        else:
            row = AppSetting(key=key, value=value)
            db.add(row)
        updated.append(key)

    db.commit()
    if updated:
        logger.info(f"Settings updated: {', '.join(updated)}")

    return {"status": "saved", "updated": updated}
