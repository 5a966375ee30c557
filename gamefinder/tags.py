from typing import List, Tuple

from .models import (
    LAUNCH_DIRECT, LAUNCH_EPIC, LAUNCH_ORIGIN,
    PLATFORM_EPIC, PLATFORM_GOG, PLATFORM_ORIGIN, PLATFORM_RIOT,
    PLATFORM_STANDALONE, PLATFORM_STEAM, PLATFORM_UBISOFT, PLATFORM_XBOX,
)
from .utils import norm_path

# (path substrings, tag, platform); platform is taken from the first hit
PLATFORM_TABLE = (
    (("steam",), "Steam", PLATFORM_STEAM),
    (("epic",), "Epic Games", PLATFORM_EPIC),
    (("origin", "ea games"), "EA/Origin", PLATFORM_ORIGIN),
    (("gog",), "GOG", PLATFORM_GOG),
    (("ubisoft", "uplay"), "Ubisoft", PLATFORM_UBISOFT),
    (("riot games",), "Riot Games", PLATFORM_RIOT),
    (("xboxgames",), "Xbox Game Pass", PLATFORM_XBOX),
)

# Platforms whose client has to broker the launch.
LAUNCHER_METHODS = {
    PLATFORM_EPIC: LAUNCH_EPIC,
    PLATFORM_ORIGIN: LAUNCH_ORIGIN,
}

def _hits(directory: str):
    p = norm_path(directory)
    for needles, tag, platform in PLATFORM_TABLE:
        if any(n in p for n in needles):
            yield tag, platform

def detect_tags(directory: str) -> List[str]:
    tags: List[str] = []
    for tag, _ in _hits(directory):
        if tag not in tags:
            tags.append(tag)
    return tags

def detect_platform(directory: str) -> str:
    for _, platform in _hits(directory):
        return platform
    return PLATFORM_STANDALONE

def infer(directory: str) -> Tuple[List[str], str]:
    return detect_tags(directory), detect_platform(directory)

def launch_method_for(platform: str) -> str:
    return LAUNCHER_METHODS.get(platform, LAUNCH_DIRECT)
