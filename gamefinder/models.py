from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

PLATFORM_STEAM = "steam"
PLATFORM_EPIC = "epic"
PLATFORM_ORIGIN = "origin"
PLATFORM_GOG = "gog"
PLATFORM_UBISOFT = "ubisoft"
PLATFORM_RIOT = "riot"
PLATFORM_XBOX = "xbox"
PLATFORM_STANDALONE = "standalone"

PLATFORMS = frozenset({
    PLATFORM_STEAM, PLATFORM_EPIC, PLATFORM_ORIGIN, PLATFORM_GOG,
    PLATFORM_UBISOFT, PLATFORM_RIOT, PLATFORM_XBOX, PLATFORM_STANDALONE,
})

LAUNCH_DIRECT = "direct"
LAUNCH_EPIC = "epic-launcher"
LAUNCH_ORIGIN = "origin-launcher"

LAUNCH_METHODS = frozenset({LAUNCH_DIRECT, LAUNCH_EPIC, LAUNCH_ORIGIN})

# attribute name -> JSON key, in serialization order
JSON_FIELDS = (
    ("id", "id"),
    ("name", "name"),
    ("path", "path"),
    ("directory", "directory"),
    ("icon", "icon"),
    ("custom_icon", "customIcon"),
    ("last_played", "lastPlayed"),
    ("play_time", "playTime"),
    ("is_hidden", "isHidden"),
    ("is_favorite", "isFavorite"),
    ("tags", "tags"),
    ("platform", "platform"),
    ("launch_method", "launchMethod"),
)

# Owned by the user; a rescan copies these forward instead of recomputing them.
USER_FIELDS = ("custom_icon", "last_played", "play_time", "is_hidden", "is_favorite")

@dataclass
class GameEntry:
    id: str
    name: str
    path: str
    directory: str
    icon: Optional[str] = None
    custom_icon: Optional[str] = None
    last_played: Optional[str] = None     # ISO-8601
    play_time: int = 0                    # minutes
    is_hidden: bool = False
    is_favorite: bool = False
    tags: List[str] = field(default_factory=list)
    platform: str = PLATFORM_STANDALONE
    launch_method: str = LAUNCH_DIRECT

    @property
    def effective_icon(self) -> Optional[str]:
        return self.custom_icon if self.custom_icon else self.icon

    def to_dict(self) -> Dict[str, Any]:
        data = {key: getattr(self, attr) for attr, key in JSON_FIELDS}
        data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameEntry":
        kwargs = {attr: data[key] for attr, key in JSON_FIELDS if key in data}
        for required in ("id", "name", "path", "directory"):
            kwargs.setdefault(required, "")
        if kwargs.get("play_time") is None:
            kwargs["play_time"] = 0
        kwargs["tags"] = list(kwargs.get("tags") or [])
        if kwargs.get("platform") not in PLATFORMS:
            kwargs["platform"] = PLATFORM_STANDALONE
        if kwargs.get("launch_method") not in LAUNCH_METHODS:
            kwargs["launch_method"] = LAUNCH_DIRECT
        return cls(**kwargs)
