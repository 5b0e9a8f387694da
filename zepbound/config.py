from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_ROOT = str(Path.cwd())
REPO_ROOT = Path(os.getenv("ZEPBOUND_ROOT", DEFAULT_ROOT))

CSV_PATH = Path(
	os.getenv("ZEPBOUND_CSV", str(REPO_ROOT / "src" / "data" / "zepbound-weight.csv"))
)
GENERATED_DATA_PATH = REPO_ROOT / "web" / "zepbound" / "weights.generated.json"
OUT_DIR = Path(os.getenv("ZEPBOUND_OUT_DIR", str(REPO_ROOT / "html")))
PAGE_PATH = OUT_DIR / "zepbound" / "index.html"
THEME_SCRIPT_PATH = OUT_DIR / "_js" / "theme-switcher.js"

DEBOUNCE_SECONDS = float(os.getenv("ZEPBOUND_DEBOUNCE", "0.1"))
POLL_INTERVAL_SECONDS = float(os.getenv("ZEPBOUND_POLL_INTERVAL", "0.25"))
SERVE_PORT = int(os.getenv("ZEPBOUND_PORT", "8000"))
SECRET_KEY = os.getenv("ZEPBOUND_SECRET_KEY", "zepbound-preview")
