"""The saved game list: a JSON array of entries in the app-data folder.

Every read-modify-write of the file holds ``library_lock`` so a scan's save
cannot drop a play record or an edit written while the walk was running.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Iterable, List, Optional

from .models import GameEntry, USER_FIELDS

logger = logging.getLogger(__name__)

library_lock = threading.RLock()

def load_games(games_file: Path) -> List[GameEntry]:
    if not games_file.exists():
        return []
    try:
        data = json.loads(games_file.read_text("utf-8"))
    except Exception as e:
        logger.warning("could not read %s: %s", games_file, e)
        return []
    if not isinstance(data, list):
        logger.warning("%s does not hold a list, ignoring it", games_file)
        return []
    return [GameEntry.from_dict(item) for item in data if isinstance(item, dict)]

def save_games(games_file: Path, games: Iterable[GameEntry]) -> None:
    games_file.parent.mkdir(parents=True, exist_ok=True)
    data = [g.to_dict() for g in games]
    games_file.write_text(json.dumps(data, indent=2), encoding="utf-8")

def find_game(games: Iterable[GameEntry], game_id: str) -> Optional[GameEntry]:
    for g in games:
        if g.id == game_id:
            return g
    return None

def update_game(games_file: Path, game_id: str, **changes) -> Optional[GameEntry]:
    """Change user-owned fields of one saved entry. Unknown fields raise KeyError."""
    for attr in changes:
        if attr not in USER_FIELDS:
            raise KeyError(attr)
    with library_lock:
        games = load_games(games_file)
        game = find_game(games, game_id)
        if game is None:
            return None
        for attr, value in changes.items():
            setattr(game, attr, value)
        save_games(games_file, games)
    return game

def record_play(games_file: Path, game_id: str, minutes: int, when: str) -> Optional[GameEntry]:
    with library_lock:
        games = load_games(games_file)
        game = find_game(games, game_id)
        if game is None:
            return None
        game.play_time = max(0, int(game.play_time or 0)) + max(0, int(minutes))
        game.last_played = when
        save_games(games_file, games)
    return game
