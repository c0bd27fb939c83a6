import os
import sys
import json
import logging
from pathlib import Path
from dotenv import load_dotenv
from appdirs import user_data_dir, user_config_dir

logger = logging.getLogger(__name__)

# Used for the per-user directory names
APP_NAME = "Resume Builder"

# Repository root when running from source; frozen builds unpack under sys._MEIPASS
def _source_project_root() -> Path:
	return Path(__file__).resolve().parent.parent

def resource_path(relative_path: str) -> Path:
	"""Locate a packaged file both from a checkout and from a frozen build."""
	base = getattr(sys, "_MEIPASS", None)
	if base:
		return Path(base) / relative_path
	return _source_project_root() / relative_path

# A .env next to the sources is honoured when running from a checkout
_DEV_ENV = _source_project_root() / ".env"
if _DEV_ENV.exists():
	load_dotenv(_DEV_ENV)

# Per-user writable locations; RESUME_BUILDER_DATA_DIR and RESUME_BUILDER_CONFIG_DIR override the platform defaults
USER_DATA_DIR = Path(os.getenv("RESUME_BUILDER_DATA_DIR") or user_data_dir(APP_NAME))
USER_DATA_DIR.mkdir(parents=True, exist_ok=True)

USER_CONFIG_DIR = Path(os.getenv("RESUME_BUILDER_CONFIG_DIR") or user_config_dir(APP_NAME))
USER_CONFIG_DIR.mkdir(parents=True, exist_ok=True)

CONFIG_PATH = USER_CONFIG_DIR / "config.json"

def _read_config_file() -> dict:
	try:
		if CONFIG_PATH.exists():
			return json.loads(CONFIG_PATH.read_text() or "{}")
	except (OSError, ValueError):
		logger.warning("config: could not read %s; using defaults", CONFIG_PATH)
	return {}

def _write_config_file(cfg: dict) -> None:
	try:
		CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
		CONFIG_PATH.write_text(json.dumps(cfg, indent=2))
	except OSError:
		logger.warning("config: failed to write %s", CONFIG_PATH)

def get_saved_api_key() -> str:
	cfg = _read_config_file()
	return (cfg.get("RESUME_BUILDER_OPENAI_API_KEY") or "").strip()

def save_api_key(key: str) -> None:
	cfg = _read_config_file()
	cfg["RESUME_BUILDER_OPENAI_API_KEY"] = key.strip()
	_write_config_file(cfg)

def _env_float(name: str, default: float) -> float:
	raw = os.getenv(name)
	if raw is None or not raw.strip():
		return default
	try:
		return float(raw)
	except ValueError:
		logger.warning("config: %s=%r is not a number; using %s", name, raw, default)
		return default

# Model key: environment first, then the key saved through the UI
OPENAI_API_KEY = os.getenv("RESUME_BUILDER_OPENAI_API_KEY") or get_saved_api_key()

# "pool" serves canned suggestions; "openai" asks the model
SUGGESTIONS_BACKEND = (os.getenv("RESUME_BUILDER_SUGGESTIONS") or "pool").strip().lower()
SUGGESTION_DELAY_SECONDS = _env_float("RESUME_BUILDER_SUGGESTION_DELAY", 1.0)
SUGGESTION_MODEL = os.getenv("RESUME_BUILDER_OPENAI_MODEL") or "gpt-4o-mini"

# Export rendering
EXPORT_SCALE = _env_float("RESUME_BUILDER_EXPORT_SCALE", 2.0)
PDF_DPI = int(_env_float("RESUME_BUILDER_PDF_DPI", 150))

# Launcher (run_app.py)
PREFERRED_PORT = int(_env_float("RESUME_BUILDER_PORT", 8000))
OPEN_BROWSER = (os.getenv("RESUME_BUILDER_OPEN_BROWSER") or "1").strip().lower() not in {"0", "false", "no"}

# Templates for views and the preview
VIEWS_DIR = resource_path("resume_builder/views")

# Exported PDF and DOCX files land here and are served under /files
OUTPUT_DIR = USER_DATA_DIR / "output"
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

# Reported by /api/health and the landing page
APP_VERSION = "0.1.0"
