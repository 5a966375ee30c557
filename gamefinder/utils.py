import base64
import os
import re
from pathlib import Path
from typing import Optional

EPIC_LAUNCHER_DEFAULT = (
    r"C:\Program Files (x86)\Epic Games\Launcher\Portal\Binaries\Win32\EpicGamesLauncher.exe"
)
ORIGIN_LAUNCHER_DEFAULT = r"C:\Program Files (x86)\Origin\Origin.exe"

def b64url_encode(s: str) -> str:
    return base64.urlsafe_b64encode(s.encode()).decode().rstrip("=")

def b64url_decode(s: str) -> str:
    pad = "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode((s + pad).encode()).decode()

def is_windows() -> bool:
    return os.name == "nt"

def norm_path(p: str) -> str:
    """Lower-case, forward-slash form used for every substring test on paths."""
    return str(p).replace("\\", "/").lower()

def alnum_only(s: str) -> str:
    return re.sub(r"[^a-z0-9]", "", s.lower())

def sanitize_filename(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", name)

def _env_or_default(env_name: str, default: str) -> Optional[Path]:
    env = os.environ.get(env_name)
    if env and Path(env).exists():
        return Path(env)
    p = Path(default)
    return p if p.exists() else None

def find_epic_launcher() -> Optional[Path]:
    return _env_or_default("EPIC_LAUNCHER", EPIC_LAUNCHER_DEFAULT)

def find_origin_launcher() -> Optional[Path]:
    return _env_or_default("ORIGIN_LAUNCHER", ORIGIN_LAUNCHER_DEFAULT)
