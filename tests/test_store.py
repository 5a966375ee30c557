import json
import threading

import pytest

from gamefinder.library import find_game, load_games, record_play, save_games, update_game
from gamefinder.models import GameEntry
from gamefinder.settings import (
    DEFAULT_SETTINGS, add_custom_path, get_setting, is_valid_setting, load_settings,
    remove_custom_path, reset_settings, save_settings, update_setting,
)


def _entry(name="Foo"):
    path = f"/g/{name}/{name}.exe"
    return GameEntry(id="id-" + name, name=name, path=path, directory=f"/g/{name}")


# ─── settings ─────────────────────────────────────────────────────────────────

def test_defaults_when_missing_or_corrupt(tmp_path):
    f = tmp_path / "settings.json"
    assert load_settings(f) == DEFAULT_SETTINGS
    f.write_text("{not json", encoding="utf-8")
    assert load_settings(f) == DEFAULT_SETTINGS


def test_file_values_override_defaults_and_unknown_keys_drop(tmp_path):
    f = tmp_path / "settings.json"
    f.write_text(json.dumps({"scan_depth": 5, "theme": "dark"}), encoding="utf-8")
    s = load_settings(f)
    assert s["scan_depth"] == 5
    assert s["auto_scan"] is True
    assert "theme" not in s


def test_defaults_are_not_shared(tmp_path):
    f = tmp_path / "settings.json"
    load_settings(f)["custom_game_paths"].append("/x")
    assert load_settings(f)["custom_game_paths"] == []


def test_custom_paths(tmp_path):
    f = tmp_path / "nested" / "settings.json"
    assert add_custom_path(f, "/mnt/games")
    assert not add_custom_path(f, "/mnt/games")
    assert load_settings(f)["custom_game_paths"] == ["/mnt/games"]
    assert remove_custom_path(f, "/mnt/games")
    assert not remove_custom_path(f, "/mnt/games")
    assert load_settings(f)["custom_game_paths"] == []


def test_update_setting_only_known_keys(tmp_path):
    f = tmp_path / "settings.json"
    save_settings(f, dict(DEFAULT_SETTINGS))
    assert update_setting(f, "auto_scan", False)
    assert not update_setting(f, "nope", 1)
    assert load_settings(f)["auto_scan"] is False


def test_update_setting_checks_value_shape(tmp_path):
    f = tmp_path / "settings.json"
    assert not update_setting(f, "custom_game_paths", "/mnt/games")
    assert not update_setting(f, "scan_depth", -1)
    assert not update_setting(f, "scan_depth", True)
    assert not update_setting(f, "auto_scan", "yes")
    assert update_setting(f, "scan_depth", 0)
    assert get_setting(f, "scan_depth") == 0
    assert get_setting(f, "nope", "fallback") == "fallback"


def test_is_valid_setting():
    assert is_valid_setting("custom_game_paths", ["/a", "/b"])
    assert not is_valid_setting("custom_game_paths", ["/a", 3])
    assert is_valid_setting("language", "fr")
    assert not is_valid_setting("language", None)
    assert not is_valid_setting("theme", "dark")


def test_bad_values_on_disk_fall_back_to_defaults(tmp_path):
    f = tmp_path / "settings.json"
    f.write_text(json.dumps({"custom_game_paths": "/", "scan_depth": "deep", "auto_scan": False}),
                 encoding="utf-8")
    s = load_settings(f)
    assert s["custom_game_paths"] == [] and s["scan_depth"] == 3
    assert s["auto_scan"] is False
    assert add_custom_path(f, "/mnt/games")
    f.write_text("[1, 2]", encoding="utf-8")
    assert load_settings(f) == DEFAULT_SETTINGS


def test_reset_settings(tmp_path):
    f = tmp_path / "settings.json"
    add_custom_path(f, "/mnt/games")
    update_setting(f, "auto_scan", False)
    assert reset_settings(f) == DEFAULT_SETTINGS
    assert load_settings(f) == DEFAULT_SETTINGS


# ─── library ──────────────────────────────────────────────────────────────────

def test_games_round_trip(tmp_path):
    f = tmp_path / "games.json"
    save_games(f, [_entry("Foo"), _entry("Bar")])
    raw = json.loads(f.read_text("utf-8"))
    assert raw[0]["launchMethod"] == "direct" and raw[0]["customIcon"] is None
    assert [g.name for g in load_games(f)] == ["Foo", "Bar"]


def test_unreadable_library_is_empty(tmp_path):
    f = tmp_path / "games.json"
    assert load_games(f) == []
    f.write_text("[{]", encoding="utf-8")
    assert load_games(f) == []
    f.write_text('{"id": "x"}', encoding="utf-8")
    assert load_games(f) == []


def test_update_game_user_fields(tmp_path):
    f = tmp_path / "games.json"
    save_games(f, [_entry("Foo")])
    g = update_game(f, "id-Foo", is_favorite=True, custom_icon="/pics/foo.png")
    assert g.is_favorite and g.effective_icon == "/pics/foo.png"
    assert find_game(load_games(f), "id-Foo").is_favorite is True
    assert update_game(f, "missing", is_hidden=True) is None
    with pytest.raises(KeyError):
        update_game(f, "id-Foo", name="Other")


def test_record_play_accumulates(tmp_path):
    f = tmp_path / "games.json"
    save_games(f, [_entry("Foo")])
    record_play(f, "id-Foo", 30, "2024-05-01T20:00:00+00:00")
    g = record_play(f, "id-Foo", 15, "2024-05-02T20:00:00+00:00")
    assert g.play_time == 45
    assert find_game(load_games(f), "id-Foo").last_played == "2024-05-02T20:00:00+00:00"


def test_concurrent_play_records_all_land(tmp_path):
    f = tmp_path / "games.json"
    save_games(f, [_entry("Foo")])
    threads = [threading.Thread(target=record_play, args=(f, "id-Foo", 5, "2024-05-01T20:00:00+00:00"))
               for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)
    assert find_game(load_games(f), "id-Foo").play_time == 40
