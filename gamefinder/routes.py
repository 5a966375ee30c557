from __future__ import annotations
import base64
import io
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from flask import Blueprint, current_app, abort, jsonify, request, send_file

from .catalog import scan_roots
from .icons import IconResolver, clear_icon_cache
from .launch import launch_game
from .library import (
    find_game, library_lock, load_games, record_play, save_games, update_game,
)
from .merge import merge_with_persisted, remove_duplicates
from .models import GameEntry
from .scanning import scan_games
from .settings import (
    DEFAULT_SETTINGS, add_custom_path, is_valid_setting, load_settings, remove_custom_path,
    reset_settings, save_settings,
)

logger = logging.getLogger(__name__)

bp = Blueprint("gamefinder", __name__)

_scan_lock = threading.Lock()

# JSON key -> (attribute, accepted types)
EDITABLE_FIELDS = {
    "isFavorite": ("is_favorite", (bool,)),
    "isHidden": ("is_hidden", (bool,)),
    "customIcon": ("custom_icon", (str, type(None))),
}

def _cfg():
    c = current_app.config
    return (
        Path(c["SETTINGS_FILE"]),
        Path(c["GAMES_FILE"]),
        c["ICON_CACHE_DIR"],
        int(c["MAX_SCAN_DEPTH"]),
        int(c["SCAN_WORKERS"]),
    )

def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")

def scan_library(config) -> List[GameEntry]:
    """Scan catalog + custom roots, merge with the saved library, save, return it."""
    settings_file = Path(config["SETTINGS_FILE"])
    games_file = Path(config["GAMES_FILE"])
    settings = load_settings(settings_file)

    custom = settings.get("custom_game_paths") or []
    if config.get("SCAN_ROOTS") is not None:
        roots = list(config["SCAN_ROOTS"]) + [p for p in custom if p not in config["SCAN_ROOTS"]]
    else:
        roots = scan_roots(custom)

    depth = settings.get("scan_depth")
    if depth is None:
        depth = config["MAX_SCAN_DEPTH"]
    resolver = IconResolver(config["ICON_CACHE_DIR"], extractor=config.get("ICON_EXTRACTOR"),
                            cache=config["ICON_CACHE"])
    with _scan_lock:
        fresh = remove_duplicates(scan_games(roots, max_depth=int(depth), resolver=resolver,
                                             workers=int(config["SCAN_WORKERS"])))
        # read after the walk, under the lock update_game and record_play take
        with library_lock:
            games = merge_with_persisted(fresh, load_games(games_file))
            save_games(games_file, games)
    return games

def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="expected a JSON object")
    return data

@bp.get("/api/games")
def games_list():
    _, GAMES_FILE, *_ = _cfg()
    return jsonify([g.to_dict() for g in load_games(GAMES_FILE)])

@bp.post("/api/scan")
def scan():
    games = scan_library(current_app.config)
    return jsonify([g.to_dict() for g in games])

@bp.patch("/api/games/<game_id>")
def game_update(game_id):
    _, GAMES_FILE, *_ = _cfg()
    data = _json_body()
    changes = {}
    for key, value in data.items():
        if key not in EDITABLE_FIELDS:
            abort(400, description=f"field not editable: {key}")
        attr, types = EDITABLE_FIELDS[key]
        if not isinstance(value, types):
            abort(400, description=f"bad value for {key}")
        changes[attr] = value
    game = update_game(GAMES_FILE, game_id, **changes)
    if game is None:
        abort(404)
    return jsonify(game.to_dict())

@bp.post("/api/games/<game_id>/launch")
def game_launch(game_id):
    _, GAMES_FILE, *_ = _cfg()
    game = find_game(load_games(GAMES_FILE), game_id)
    if game is None:
        abort(404)

    def _played(minutes: int) -> None:
        record_play(GAMES_FILE, game_id, minutes, _now())

    ok, msg = launch_game(game, on_exit=_played)
    return (jsonify({"ok": ok, ("message" if ok else "error"): msg}), 200 if ok else 500)

@bp.get("/api/settings")
def settings_get():
    SETTINGS_FILE, *_ = _cfg()
    return jsonify(load_settings(SETTINGS_FILE))

@bp.post("/api/settings")
def settings_post():
    SETTINGS_FILE, *_ = _cfg()
    data = _json_body()
    unknown = sorted(k for k in data if k not in DEFAULT_SETTINGS)
    if unknown:
        abort(400, description="unknown settings: " + ", ".join(unknown))
    bad = sorted(k for k, v in data.items() if not is_valid_setting(k, v))
    if bad:
        abort(400, description="bad value for: " + ", ".join(bad))
    settings = load_settings(SETTINGS_FILE)
    settings.update(data)
    save_settings(SETTINGS_FILE, settings)
    return jsonify(settings)

@bp.post("/api/settings/reset")
def settings_reset():
    SETTINGS_FILE, *_ = _cfg()
    return jsonify(reset_settings(SETTINGS_FILE))

@bp.post("/api/settings/paths")
def settings_path_add():
    SETTINGS_FILE, *_ = _cfg()
    path = str(_json_body().get("path") or "").strip()
    if not path:
        abort(400, description="missing path")
    added = add_custom_path(SETTINGS_FILE, path)
    return jsonify({"ok": added, "paths": load_settings(SETTINGS_FILE)["custom_game_paths"]})

@bp.delete("/api/settings/paths")
def settings_path_remove():
    SETTINGS_FILE, *_ = _cfg()
    path = str(_json_body().get("path") or "").strip()
    removed = remove_custom_path(SETTINGS_FILE, path)
    return jsonify({"ok": removed, "paths": load_settings(SETTINGS_FILE)["custom_game_paths"]})

@bp.get("/icon/<game_id>")
def icon(game_id):
    _, GAMES_FILE, *_ = _cfg()
    game = find_game(load_games(GAMES_FILE), game_id)
    if game is None or not game.effective_icon:
        abort(404)
    ref = game.effective_icon
    if ref.startswith("data:image/png;base64,"):
        raw = base64.b64decode(ref.split(",", 1)[1])
        return send_file(io.BytesIO(raw), mimetype="image/png")
    if not os.path.isfile(ref):
        abort(404)
    return send_file(os.path.abspath(ref))

@bp.delete("/api/icons/cache")
def icon_cache_clear():
    _, _, ICON_CACHE_DIR, *_ = _cfg()
    removed = clear_icon_cache(ICON_CACHE_DIR, current_app.config["ICON_CACHE"])
    return jsonify({"ok": True, "removed": removed})

@bp.get("/favicon.ico")
def favicon():
    return ("", 204)
