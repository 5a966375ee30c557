import logging
import os
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from .classifier import in_service_folder, is_game_executable
from .icons import IconResolver
from .merge import merge_with_persisted, remove_duplicates
from .models import GameEntry
from .tags import infer, launch_method_for
from .utils import b64url_decode, b64url_encode, norm_path

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3

def _epic_infrastructure(dirname: str) -> bool:
    return ("launcher" in dirname or "portal" in dirname
            or dirname in ("prereqs", "tools"))

# (marker in the current directory's path, predicate on a lower-cased subdir name)
PRUNE_RULES = (
    ("epic games", _epic_infrastructure),
)

def game_id_for(path: str) -> str:
    return b64url_encode(path)

def path_for_id(gid: str) -> str:
    return b64url_decode(gid)

def clean_game_name(name: str) -> str:
    name = re.sub(r"[-_]", " ", name)
    name = re.sub(r"\b\w", lambda m: m.group(0).upper(), name)
    return name.strip()

def extract_game_name(exe_path: str) -> str:
    filename = os.path.splitext(os.path.basename(exe_path))[0]
    parent = os.path.basename(os.path.dirname(exe_path))
    low = parent.lower()
    if len(parent) > len(filename) and "bin" not in low and "game" not in low:
        return clean_game_name(parent)
    return clean_game_name(filename)

def is_valid_game(game: GameEntry) -> bool:
    return not in_service_folder(game.path)

def create_game_entry(exe_path: str, resolver: Optional[IconResolver] = None) -> GameEntry:
    name = extract_game_name(exe_path)
    directory = os.path.dirname(exe_path)
    tags, platform = infer(directory)
    launch_method = launch_method_for(platform)
    icon = resolver.resolve(exe_path, name) if resolver is not None else None
    return GameEntry(
        id=game_id_for(exe_path),
        name=name,
        path=exe_path,
        directory=directory,
        icon=icon,
        tags=tags,
        platform=platform,
        launch_method=launch_method,
    )

@dataclass
class ScanContext:
    """State of one walk over one root."""
    max_depth: int = DEFAULT_MAX_DEPTH
    resolver: Optional[IconResolver] = None
    cancel: Optional[threading.Event] = None
    games: List[GameEntry] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()

def _pruner(directory: str) -> Optional[Callable[[str], bool]]:
    p = norm_path(directory)
    for marker, predicate in PRUNE_RULES:
        if marker in p:
            return predicate
    return None

def _add_game(exe_path: str, ctx: ScanContext) -> None:
    try:
        game = create_game_entry(exe_path, ctx.resolver)
    except Exception as e:
        logger.warning("skipping %s: %s", exe_path, e)
        return
    if is_valid_game(game):
        ctx.games.append(game)
    else:
        logger.debug("dropped %s: service folder", exe_path)

def walk_directory(directory: str, depth: int, ctx: ScanContext) -> None:
    if depth > ctx.max_depth or ctx.cancelled:
        return
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name.lower())
    except OSError as e:
        logger.debug("cannot read %s: %s", directory, e)
        return

    prune = _pruner(directory)
    for entry in entries:
        if ctx.cancelled:
            return
        try:
            is_dir = entry.is_dir()
            is_file = not is_dir and entry.is_file()
        except OSError:
            continue
        if is_dir:
            if prune is not None and prune(entry.name.lower()):
                logger.debug("pruned %s", entry.path)
                continue
            walk_directory(entry.path, depth + 1, ctx)
        elif is_file and is_game_executable(entry.name, entry.path):
            _add_game(entry.path, ctx)

def scan_root(root: str, *, max_depth: int = DEFAULT_MAX_DEPTH,
              resolver: Optional[IconResolver] = None,
              cancel: Optional[threading.Event] = None) -> List[GameEntry]:
    if not os.path.isdir(root):
        logger.debug("root not found: %s", root)
        return []
    ctx = ScanContext(max_depth=max_depth, resolver=resolver, cancel=cancel)
    walk_directory(os.path.abspath(root), 0, ctx)
    if ctx.games:
        logger.info("%s: %d game(s)", root, len(ctx.games))
    return ctx.games

def scan_games(roots: Iterable[str], *, max_depth: int = DEFAULT_MAX_DEPTH,
               resolver: Optional[IconResolver] = None, workers: int = 1,
               cancel: Optional[threading.Event] = None) -> List[GameEntry]:
    """
    Walk every root and return the accepted games, in root order.

    Unreadable or missing roots simply contribute nothing. If ``cancel`` gets
    set the walk stops early and whatever was found so far is returned.
    """
    roots = list(roots)
    logger.info("scanning %d root(s), depth %d", len(roots), max_depth)

    def _one(root: str) -> List[GameEntry]:
        return scan_root(root, max_depth=max_depth, resolver=resolver, cancel=cancel)

    if workers > 1 and len(roots) > 1:
        with ThreadPoolExecutor(max_workers=workers) as ex:
            chunks = list(ex.map(_one, roots))
    else:
        chunks = [_one(r) for r in roots]

    games = [g for chunk in chunks for g in chunk]
    if cancel is not None and cancel.is_set():
        logger.info("scan cancelled, returning %d game(s)", len(games))
    else:
        logger.info("scan complete: %d game(s)", len(games))
    return games

def find_games(roots: Iterable[str], *, persisted: Sequence = (),
               max_depth: int = DEFAULT_MAX_DEPTH, resolver: Optional[IconResolver] = None,
               workers: int = 1, cancel: Optional[threading.Event] = None) -> List[GameEntry]:
    """Scan, collapse duplicates and carry user data over from ``persisted``."""
    games = scan_games(roots, max_depth=max_depth, resolver=resolver,
                       workers=workers, cancel=cancel)
    games = remove_duplicates(games)
    return merge_with_persisted(games, persisted)
