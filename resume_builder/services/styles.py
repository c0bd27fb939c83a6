import json
import logging
from pathlib import Path
from resume_builder.config import VIEWS_DIR

logger = logging.getLogger(__name__)

# Word built-in style names used by the DOCX export
DEFAULT_STYLE_NAMES = {
	"name": "Title",
	"contact": "Subtitle",
	"section_heading": "Heading 1",
	"entry_heading": "Heading 2",
	"meta": "Normal",
	"body": "Normal",
	"bullet": "List Bullet",
}


def load_style_names() -> dict:
	path: Path = VIEWS_DIR / "style_map.json"
	names = DEFAULT_STYLE_NAMES.copy()
	if path.exists():
		try:
			user_map = json.loads(path.read_text())
			if isinstance(user_map, dict):
				names.update(user_map)
		except (OSError, ValueError):
			logger.warning("styles: could not read %s; using defaults", path)
	return names
