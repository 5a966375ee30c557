"""Built-in list of places where games usually get installed."""
import os
from pathlib import Path
from typing import Iterable, List, Optional

DRIVES = ("C:", "D:", "E:", "F:")

def _steam_roots(home: str) -> List[str]:
    return [
        r"C:\Program Files (x86)\Steam\steamapps\common",
        r"C:\Program Files\Steam\steamapps\common",
        os.path.join(home, r"Steam\steamapps\common"),
    ] + [d + r"\Steam\steamapps\common" for d in DRIVES[1:]]

def _epic_roots(home: str) -> List[str]:
    return [
        r"C:\Program Files\Epic Games",
        r"C:\Program Files (x86)\Epic Games",
        os.path.join(home, "Epic Games"),
    ] + [d + r"\Epic Games" for d in DRIVES[1:]]

def _origin_roots(home: str) -> List[str]:
    return [
        r"C:\Program Files\Origin Games",
        r"C:\Program Files (x86)\Origin Games",
        r"C:\Program Files\EA Games",
        r"C:\Program Files (x86)\EA Games",
        r"D:\Origin Games",
        r"E:\Origin Games",
    ]

def _gog_roots(home: str) -> List[str]:
    return [
        r"C:\GOG Games",
        r"C:\Program Files\GOG Galaxy\Games",
        r"C:\Program Files (x86)\GOG Galaxy\Games",
        r"D:\GOG Games",
        r"E:\GOG Games",
    ]

def _generic_roots(home: str) -> List[str]:
    return [d + r"\Games" for d in DRIVES] + [
        r"C:\Program Files\Games",
        r"C:\Program Files (x86)\Games",
        r"D:\Program Files\Games",
        r"E:\Program Files\Games",
        os.path.join(home, "Games"),
        os.path.join(home, r"Documents\Games"),
        os.path.join(home, r"AppData\Local\Games"),
    ]

def _special_roots(home: str) -> List[str]:
    return [r"C:\Riot Games", r"C:\XboxGames"]

def _posix_roots(home: str) -> List[str]:
    return [
        os.path.join(home, ".steam", "steam", "steamapps", "common"),
        os.path.join(home, ".local", "share", "Steam", "steamapps", "common"),
        os.path.join(home, "Games"),
    ]

def default_roots(home: Optional[str] = None) -> List[str]:
    home = home or str(Path.home())
    roots: List[str] = []
    for group in (_steam_roots, _epic_roots, _origin_roots, _gog_roots,
                  _generic_roots, _special_roots):
        roots.extend(group(home))
    if os.name != "nt":
        roots.extend(_posix_roots(home))
    return _unique(roots)

def scan_roots(custom_paths: Iterable[str] = (), home: Optional[str] = None) -> List[str]:
    """Built-in roots followed by the user's own, without repeats."""
    return _unique(default_roots(home) + [p for p in custom_paths if p])

def _unique(paths: List[str]) -> List[str]:
    seen = set()
    out = []
    for p in paths:
        if p not in seen:
            seen.add(p)
            out.append(p)
    return out
