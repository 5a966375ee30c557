import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask
from .icons import IconCache
from .routes import bp as routes_bp

# Bind only localhost unless overridden
BIND = os.environ.get("BIND", "127.0.0.1")
PORT = int(os.environ.get("PORT", "5000"))
DATA_DIR = os.environ.get("GAMEFINDER_DATA", str(Path.home() / ".gamefinder"))
LOG_LEVEL = os.environ.get("GAMEFINDER_LOG_LEVEL", "INFO")

def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

def ensure_data_dir(data_dir: str) -> Path:
    p = Path(data_dir)
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SystemExit(f"cannot create data directory {data_dir}: {e}")
    return p

def create_app(data_dir: str, scan_roots=None) -> Flask:
    """``scan_roots`` replaces the built-in catalog (custom paths still apply)."""
    data = Path(data_dir)
    app = Flask(__name__)
    app.config["DATA_DIR"] = str(data)
    app.config["SETTINGS_FILE"] = str(data / "settings.json")
    app.config["GAMES_FILE"] = str(data / "games.json")
    app.config["ICON_CACHE_DIR"] = str(data / "icon-cache")
    app.config["MAX_SCAN_DEPTH"] = 3
    app.config["SCAN_WORKERS"] = int(os.environ.get("GAMEFINDER_SCAN_WORKERS", "1"))
    app.config["SCAN_ROOTS"] = list(scan_roots) if scan_roots is not None else None
    app.config["ICON_CACHE"] = IconCache()
    app.config["ICON_EXTRACTOR"] = None   # None = pick per host

    app.register_blueprint(routes_bp)
    return app
