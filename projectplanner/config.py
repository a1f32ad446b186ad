"""Environment driven settings shared by the store and the web viewer.

Database path precedence:
  1) Environment variable PROJECT_DB_PATH (UNC or local)
  2) db_path.txt file in the working directory containing a path
  3) Default: project_data.db in the working directory

Env:
  WEB_SQLITE_RO=1|true|yes   -> open the database read-only
  TIMELINE_DAY_WIDTH         -> pixels per day column (default 40)
  TIMELINE_ROW_HEIGHT        -> pixels per task row (default 60)
"""
import os
from dataclasses import dataclass
from typing import Optional

DB_FILE_DEFAULT = "project_data.db"
DB_PATH_FILE = "db_path.txt"

DAY_WIDTH = 40
ROW_HEIGHT = 60
# Vertical center of a bar inside its row
ROW_CENTER = 25
# Extra space below the last row
BOTTOM_PADDING = 40
DEFAULT_PERIOD = "month"


def truthy_env(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_db_path(cwd=None) -> str:
    env_path = os.environ.get("PROJECT_DB_PATH")
    if env_path and env_path.strip():
        return env_path.strip()
    base = cwd or os.getcwd()
    cfg_file = os.path.join(base, DB_PATH_FILE)
    if os.path.exists(cfg_file):
        with open(cfg_file, "r", encoding="utf-8") as f:
            p = f.read().strip()
            if p:
                return p
    return os.path.join(base, DB_FILE_DEFAULT)


def read_only_requested() -> bool:
    return truthy_env(os.environ.get("WEB_SQLITE_RO"))


def _int_env(name, default):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        val = int(raw)
    except ValueError:
        return default
    return val if val > 0 else default


@dataclass(frozen=True)
class TimelineConfig:
    day_width: int = DAY_WIDTH
    row_height: int = ROW_HEIGHT
    row_center: int = ROW_CENTER
    bottom_padding: int = BOTTOM_PADDING

    @classmethod
    def from_env(cls):
        return cls(
            day_width=_int_env("TIMELINE_DAY_WIDTH", DAY_WIDTH),
            row_height=_int_env("TIMELINE_ROW_HEIGHT", ROW_HEIGHT),
        )
