"""
Decides whether an executable found on disk is a game.

The default is to accept. A file is turned down when its name looks like
infrastructure (installers, updaters, crash reporters, store services), when it
sits in a launcher/portal/prerequisite folder, or when a publisher rule claims
its folder and does not list it as the real game binary.
"""
import logging
import os
from typing import Callable, NamedTuple, Tuple

from .utils import norm_path

logger = logging.getLogger(__name__)

EXECUTABLE_EXTENSIONS = frozenset({".exe"})

GENERIC_EXCLUDE_KEYWORDS = (
    "unins", "setup", "install", "update", "patch",
    "config", "settings", "crash", "report", "log", "debug",
    "vcredist", "directx", "redist",
)

PUBLISHER_EXCLUDE_KEYWORDS = (
    # Epic online services
    "epiconlineserviceshost", "epiconlineservicesuihelper", "epiconlineservicesuserhelper",
    # Steam
    "steamservice", "steamwebhelper", "steamerrorhandler",
    # Riot / League of Legends
    "leagueclientuxrender", "riotclientelectron", "riotclientservices",
    "riotclientcrashhandler", "leagueclientux", "riot client",
    # protected-game shims
    "start_protected_game", "apexlauncher",
)

SERVICE_FOLDER_SEGMENTS = ("/launcher/", "/portal/", "/prereqs/", "/redist/")


class PublisherRule(NamedTuple):
    name: str
    matches: Callable[[str], bool]     # gets the normalized full path
    decide: Callable[[str], bool]      # gets the lower-cased filename


def _only(*names: str) -> Callable[[str], bool]:
    allowed = frozenset(names)
    return lambda filename: filename in allowed

def _never(filename: str) -> bool:
    return False

def _path_contains(fragment: str) -> Callable[[str], bool]:
    return lambda path: fragment in path


# First matching rule decides; order matters when folders nest.
PUBLISHER_RULES: Tuple[PublisherRule, ...] = (
    PublisherRule("league-of-legends", _path_contains("riot games/league of legends"),
                  _only("leagueclient.exe")),
    PublisherRule("riot-client", _path_contains("riot games/riot client"), _never),
    PublisherRule("apex-legends", _path_contains("apex legends"),
                  _only("r5apex.exe", "r5apex_dx12.exe")),
)


def has_executable_extension(filename: str) -> bool:
    return os.path.splitext(filename)[1].lower() in EXECUTABLE_EXTENSIONS

def excluded_keyword(filename: str):
    name = filename.lower()
    for kw in GENERIC_EXCLUDE_KEYWORDS + PUBLISHER_EXCLUDE_KEYWORDS:
        if kw in name:
            return kw
    return None

def in_service_folder(full_path: str) -> bool:
    p = norm_path(full_path)
    return any(seg in p for seg in SERVICE_FOLDER_SEGMENTS)

def matching_rule(full_path: str):
    p = norm_path(full_path)
    for rule in PUBLISHER_RULES:
        if rule.matches(p):
            return rule
    return None

def is_game_executable(filename: str, full_path: str = "") -> bool:
    if not has_executable_extension(filename):
        return False

    kw = excluded_keyword(filename)
    if kw:
        logger.debug("reject %s: keyword %r", full_path or filename, kw)
        return False

    if in_service_folder(full_path):
        logger.debug("reject %s: service folder", full_path)
        return False

    rule = matching_rule(full_path)
    if rule is not None:
        ok = rule.decide(filename.lower())
        logger.debug("%s %s: %s rule", "accept" if ok else "reject", full_path, rule.name)
        return ok

    logger.debug("accept %s", full_path or filename)
    return True
