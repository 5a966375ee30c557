#!/usr/bin/env python3
import logging
import os
import sys
from pathlib import Path
from gamefinder import create_app, ensure_data_dir, configure_logging, BIND, PORT, DATA_DIR
from gamefinder.routes import scan_library
from gamefinder.settings import load_settings

def _resolve_data_dir() -> str:
    if len(sys.argv) >= 2:
        return os.path.abspath(sys.argv[1])
    return os.path.abspath(DATA_DIR)

if __name__ == "__main__":
    configure_logging()
    data_dir = _resolve_data_dir()
    ensure_data_dir(data_dir)
    app = create_app(data_dir)
    if load_settings(Path(app.config["SETTINGS_FILE"]))["auto_scan"]:
        games = scan_library(app.config)
        logging.getLogger("gamefinder").info("auto-scan found %d game(s)", len(games))
    app.run(host=BIND, port=PORT, debug=False)
