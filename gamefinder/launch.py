# gamefinder/launch.py
from __future__ import annotations

import logging
import subprocess
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .models import GameEntry, LAUNCH_EPIC, LAUNCH_ORIGIN
from .utils import is_windows, find_epic_launcher, find_origin_launcher

logger = logging.getLogger(__name__)

EPIC_LAUNCH_ARGS = ["-com.epicgames.launcher://"]

OnExit = Callable[[int], None]

# ──────────────────────────────────────────────────────────────────────────────
# Small helpers
# ──────────────────────────────────────────────────────────────────────────────

def _detach_kwargs() -> dict:
    if is_windows():
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)
        return {"creationflags": flags}
    return {"start_new_session": True}

def _spawn_and_track(
    argv: List[str],
    cwd: str,
    *,
    message: str,
    on_exit: Optional[OnExit] = None,
) -> Tuple[bool, str]:
    """
    Spawn the process. When ``on_exit`` is given and the returned object
    supports .wait(), a daemon thread reports the minutes it ran.
    """
    try:
        p = subprocess.Popen(argv, cwd=cwd, stdin=subprocess.DEVNULL,
                             stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
                             **_detach_kwargs())
    except Exception as e:
        logger.warning("could not start %s: %s", argv[0], e)
        return False, str(e)

    if on_exit is not None and hasattr(p, "wait"):
        started = time.monotonic()

        def _wait():
            try:
                p.wait()
            finally:
                minutes = int((time.monotonic() - started) // 60)
                try:
                    on_exit(minutes)
                except Exception:
                    logger.exception("exit callback failed for %s", argv[0])

        threading.Thread(target=_wait, daemon=True).start()

    return True, message

def _launch_direct(game: GameEntry, on_exit: Optional[OnExit], message: str) -> Tuple[bool, str]:
    cwd = game.directory or str(Path(game.path).parent)
    return _spawn_and_track([game.path], cwd, message=message, on_exit=on_exit)

def _launch_via(launcher: Optional[Path], args: List[str], client: str,
                game: GameEntry, on_exit: Optional[OnExit]) -> Tuple[bool, str]:
    if launcher is not None:
        return _spawn_and_track([str(launcher)] + args, str(launcher.parent),
                                message=f"Launched via {client}.")
    return _launch_direct(game, on_exit, f"Launched directly ({client} not found).")

# ──────────────────────────────────────────────────────────────────────────────
# Public API
# ──────────────────────────────────────────────────────────────────────────────

def launch_game(game: GameEntry, on_exit: Optional[OnExit] = None) -> Tuple[bool, str]:
    """
    Start ``game`` according to its launch method.

    - epic-launcher / origin-launcher: start the store client if it is
      installed, else fall back to running the executable.
    - direct (and anything unknown): run the executable from its folder.

    Play time is only tracked for processes we start ourselves, not for
    store clients that hand the launch off.
    """
    logger.info("launching %s (%s)", game.name, game.launch_method)
    if game.launch_method == LAUNCH_EPIC:
        return _launch_via(find_epic_launcher(), EPIC_LAUNCH_ARGS, "Epic Games Launcher", game, on_exit)
    if game.launch_method == LAUNCH_ORIGIN:
        return _launch_via(find_origin_launcher(), [], "Origin", game, on_exit)
    return _launch_direct(game, on_exit, "Launched.")
