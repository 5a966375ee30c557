"""
Icon lookup for discovered executables.

Strategies run cheapest first and the first one that produces something wins:

1. an image file next to the executable (or in a conventional asset folder),
2. the icon embedded in the executable, rasterized by an external tool,
3. nothing; drawing a placeholder is left to whoever renders the entry.
"""
from __future__ import annotations

import base64
import hashlib
import io
import logging
import os
import shutil
import subprocess
import threading
from concurrent.futures import Future
from typing import Callable, Dict, List, Optional

from PIL import Image

from .utils import alnum_only, is_windows, sanitize_filename

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".ico", ".png", ".jpg", ".jpeg", ".bmp", ".webp")
GENERIC_ICON_NAMES = ("icon", "app", "game", "logo", "launcher")
PRIORITY_PATTERNS = ("icon", "logo", "game", "app")
ASSET_SUBDIRS = ("assets", "images", "icons", "resources", "data", "img", "graphics", "game")

EXTRACT_TIMEOUT = 15  # seconds

# ──────────────────────────────────────────────────────────────────────────────
# Strategy 1: image files on disk
# ──────────────────────────────────────────────────────────────────────────────

def _image_files(directory: str) -> List[str]:
    try:
        with os.scandir(directory) as it:
            names = [e.name for e in it
                     if os.path.splitext(e.name)[1].lower() in IMAGE_EXTENSIONS and e.is_file()]
    except OSError:
        return []
    return sorted(names, key=lambda n: n.lower())

def _subdirs(directory: str) -> List[str]:
    try:
        with os.scandir(directory) as it:
            names = [e.name for e in it if e.is_dir()]
    except OSError:
        return []
    return sorted(names, key=lambda n: n.lower())

def _pick_image(directory: str, names: List[str], patterns: List[str]) -> Optional[str]:
    images = _image_files(directory)
    if not images:
        return None
    by_lower = {}
    for f in images:
        by_lower.setdefault(f.lower(), f)

    for name in names:
        for ext in IMAGE_EXTENSIONS:
            hit = by_lower.get((name + ext).lower())
            if hit:
                return os.path.join(directory, hit)

    for pattern in patterns:
        for f in images:
            if pattern in f.lower():
                return os.path.join(directory, f)

    return os.path.join(directory, images[0])

def _unique(items) -> List[str]:
    out: List[str] = []
    for i in items:
        if i and i not in out:
            out.append(i)
    return out

def find_adjacent_icon(exe_path: str, game_name: str) -> Optional[str]:
    directory = os.path.dirname(exe_path)
    stem = os.path.splitext(os.path.basename(exe_path))[0]
    game_clean = alnum_only(game_name)
    dir_clean = alnum_only(os.path.basename(directory))

    names = _unique([stem, stem.lower(), *GENERIC_ICON_NAMES,
                     game_clean, dir_clean, game_name.lower().replace(" ", "")])
    patterns = _unique([*PRIORITY_PATTERNS, game_clean, dir_clean])

    hit = _pick_image(directory, names, patterns)
    if hit:
        return hit

    wanted = set(ASSET_SUBDIRS)
    for sub in _subdirs(directory):
        if sub.lower() not in wanted:
            continue
        sub_path = os.path.join(directory, sub)
        hit = _pick_image(sub_path, names, patterns)
        if hit:
            return hit
        for nested in _subdirs(sub_path):
            images = _image_files(os.path.join(sub_path, nested))
            if images:
                return os.path.join(sub_path, nested, images[0])
    return None

# ──────────────────────────────────────────────────────────────────────────────
# Strategy 2: icon embedded in the executable
# ──────────────────────────────────────────────────────────────────────────────

def is_decodable_image(path: str) -> bool:
    try:
        if os.path.getsize(path) <= 0:
            return False
        with Image.open(path) as im:
            im.verify()
        return True
    except Exception:
        return False

class IconExtractor:
    """Rasterizes the icon embedded in an executable into a PNG file."""
    name = "none"

    def extract(self, exe_path: str, output_path: str) -> bool:
        raise NotImplementedError

class NullIconExtractor(IconExtractor):
    def extract(self, exe_path: str, output_path: str) -> bool:
        return False

_PS_SCRIPT = """
Add-Type -AssemblyName System.Drawing
try {{
    $icon = [System.Drawing.Icon]::ExtractAssociatedIcon('{exe}')
    if ($icon -eq $null) {{ Write-Output 'ERROR: no icon'; exit 1 }}
    $bitmap = $icon.ToBitmap()
    $bitmap.Save('{out}', [System.Drawing.Imaging.ImageFormat]::Png)
    $bitmap.Dispose()
    $icon.Dispose()
    if (Test-Path '{out}') {{ Write-Output 'SUCCESS' }} else {{ Write-Output 'ERROR: not written'; exit 1 }}
}} catch {{
    Write-Output "ERROR: $($_.Exception.Message)"
    exit 1
}}
"""

def _ps_quote(s: str) -> str:
    return s.replace("'", "''")

class PowerShellIconExtractor(IconExtractor):
    name = "powershell"

    def __init__(self, timeout: float = EXTRACT_TIMEOUT, executable: str = "powershell"):
        self.timeout = timeout
        self.executable = executable

    def extract(self, exe_path: str, output_path: str) -> bool:
        script = _PS_SCRIPT.format(exe=_ps_quote(exe_path), out=_ps_quote(output_path)).strip()
        argv = [self.executable, "-NoProfile", "-ExecutionPolicy", "Bypass", "-Command", script]
        kwargs = {}
        if is_windows():
            kwargs["creationflags"] = getattr(subprocess, "CREATE_NO_WINDOW", 0)
        try:
            res = subprocess.run(argv, capture_output=True, text=True, timeout=self.timeout, **kwargs)
        except subprocess.TimeoutExpired:
            logger.debug("powershell timed out on %s", exe_path)
            return False
        except OSError as e:
            logger.debug("powershell unavailable: %s", e)
            return False

        if res.stderr and res.stderr.strip():
            logger.debug("powershell stderr: %s", res.stderr.strip())
        return res.returncode == 0 and "SUCCESS" in (res.stdout or "")

class WrestoolIconExtractor(IconExtractor):
    """Uses icoutils' wrestool to pull the icon group out of a PE file."""
    name = "wrestool"

    def __init__(self, timeout: float = EXTRACT_TIMEOUT, executable: Optional[str] = None):
        self.timeout = timeout
        self.executable = shutil.which("wrestool") if executable is None else executable

    def extract(self, exe_path: str, output_path: str) -> bool:
        if not self.executable:
            return False
        try:
            res = subprocess.run([self.executable, "-x", "-t", "14", exe_path],
                                 capture_output=True, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            logger.debug("wrestool timed out on %s", exe_path)
            return False
        except OSError as e:
            logger.debug("wrestool failed to start: %s", e)
            return False
        if res.returncode != 0 or not res.stdout:
            return False
        try:
            with Image.open(io.BytesIO(res.stdout)) as im:
                im.save(output_path, format="PNG")
        except Exception as e:
            logger.debug("could not convert icon of %s: %s", exe_path, e)
            return False
        return True

def default_extractor() -> IconExtractor:
    if is_windows():
        return PowerShellIconExtractor()
    if shutil.which("wrestool"):
        return WrestoolIconExtractor()
    return NullIconExtractor()

def cache_filename(exe_path: str, game_name: str) -> str:
    digest = hashlib.sha1(exe_path.encode("utf-8")).hexdigest()[:8]
    return f"{sanitize_filename(game_name)}_{digest}.png"

def extract_native_icon(exe_path: str, game_name: str, cache_dir: str,
                        extractor: IconExtractor) -> Optional[str]:
    if not os.path.isfile(exe_path):
        return None
    os.makedirs(cache_dir, exist_ok=True)
    out = os.path.join(cache_dir, cache_filename(exe_path, game_name))
    if os.path.exists(out):
        os.remove(out)
    if extractor.extract(exe_path, out) and is_decodable_image(out):
        logger.debug("extracted icon of %s with %s", exe_path, extractor.name)
        return out
    return None

class IconCache:
    """
    Per-executable memo of extraction outcomes (including "no icon").

    Concurrent callers asking for the same key wait on the first caller's
    result instead of starting a second extraction. A remembered file that
    has since disappeared from disk is computed again.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._futures: Dict[str, Future] = {}

    @staticmethod
    def _stale(fut: Future) -> bool:
        if not fut.done() or fut.exception() is not None:
            return False
        result = fut.result()
        return result is not None and not os.path.isfile(result)

    def get_or_compute(self, key: str, compute: Callable[[], Optional[str]]) -> Optional[str]:
        with self._lock:
            fut = self._futures.get(key)
            if fut is not None and self._stale(fut):
                logger.debug("cached icon for %s is gone, extracting again", key)
                fut = None
            owner = fut is None
            if owner:
                fut = Future()
                self._futures[key] = fut
        if not owner:
            return fut.result()

        try:
            result = compute()
        except BaseException as e:
            with self._lock:
                self._futures.pop(key, None)
            fut.set_exception(e)
            raise
        fut.set_result(result)
        return result

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._futures

    def __len__(self) -> int:
        with self._lock:
            return len(self._futures)

    def clear(self) -> None:
        with self._lock:
            self._futures.clear()

def clear_icon_cache(cache_dir: str, cache: Optional[IconCache] = None) -> int:
    """Delete extracted icons from ``cache_dir``; returns how many files went."""
    if cache is not None:
        cache.clear()
    if not os.path.isdir(cache_dir):
        return 0
    removed = 0
    with os.scandir(cache_dir) as it:
        entries = list(it)
    for entry in entries:
        if not entry.is_file():
            continue
        try:
            os.remove(entry.path)
            removed += 1
        except OSError as e:
            logger.warning("could not remove %s: %s", entry.path, e)
    return removed

# ──────────────────────────────────────────────────────────────────────────────
# Resolver
# ──────────────────────────────────────────────────────────────────────────────

def to_data_uri(path: str) -> Optional[str]:
    try:
        with Image.open(path) as im:
            buf = io.BytesIO()
            im.save(buf, format="PNG")
    except Exception as e:
        logger.debug("could not embed %s: %s", path, e)
        return None
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode()

class IconResolver:
    def __init__(self, cache_dir: str, extractor: Optional[IconExtractor] = None,
                 cache: Optional[IconCache] = None, embed: bool = False):
        self.cache_dir = cache_dir
        self.extractor = extractor or default_extractor()
        self.cache = cache if cache is not None else IconCache()
        self.embed = embed
        self.strategies = [
            ("adjacent", find_adjacent_icon),
            ("native", self._native),
        ]

    def _native(self, exe_path: str, game_name: str) -> Optional[str]:
        return self.cache.get_or_compute(
            exe_path,
            lambda: extract_native_icon(exe_path, game_name, self.cache_dir, self.extractor),
        )

    def resolve(self, exe_path: str, game_name: str) -> Optional[str]:
        for name, strategy in self.strategies:
            try:
                icon = strategy(exe_path, game_name)
            except Exception as e:
                logger.debug("icon strategy %s failed for %s: %s", name, exe_path, e)
                continue
            if icon:
                logger.debug("icon for %s from %s: %s", game_name, name, icon)
                if self.embed:
                    return to_data_uri(icon) or icon
                return icon
        logger.debug("no icon for %s", game_name)
        return None
