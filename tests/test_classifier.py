from gamefinder.classifier import (
    PUBLISHER_RULES, is_game_executable, in_service_folder, matching_rule,
)

LOL = r"C:\Riot Games\League of Legends"
APEX = r"D:\Games\Apex Legends"


def test_only_exe_files_are_considered():
    assert is_game_executable("Foo.exe", r"C:\Games\Foo\Foo.exe")
    assert is_game_executable("Foo.EXE", r"C:\Games\Foo\Foo.EXE")
    assert not is_game_executable("Foo.txt", r"C:\Games\Foo\Foo.txt")
    assert not is_game_executable("Foo.dll", r"C:\Games\Foo\Foo.dll")
    assert not is_game_executable("Foo", r"C:\Games\Foo\Foo")


def test_setup_rejected_in_any_case():
    for name in ("Setup.EXE", "SETUP.exe", "setup.exe"):
        assert not is_game_executable(name, "C:\\Games\\Foo\\" + name), name


def test_generic_infrastructure_keywords():
    for name in ("unins000.exe", "UpdateTool.exe", "Patcher.exe", "GameConfig.exe",
                 "Settings.exe", "CrashReporter.exe", "BugReport.exe", "DebugConsole.exe",
                 "vcredist_x64.exe", "DirectXSetup.exe", "installer.exe"):
        assert not is_game_executable(name, "C:\\Games\\Foo\\" + name), name


def test_publisher_auxiliary_processes():
    for name in ("EpicOnlineServicesHost.exe", "EpicOnlineServicesUIHelper.exe",
                 "steamwebhelper.exe", "SteamService.exe", "steamerrorhandler.exe",
                 "LeagueClientUxRender.exe", "RiotClientServices.exe",
                 "start_protected_game.exe", "ApexLauncher.exe"):
        assert not is_game_executable(name, "C:\\Games\\X\\" + name), name


def test_service_folders_rejected():
    assert not is_game_executable("Game.exe", r"C:\Games\Foo\Launcher\Game.exe")
    assert not is_game_executable("Game.exe", r"C:\Games\Foo\Portal\Game.exe")
    assert not is_game_executable("Game.exe", r"C:\Games\Foo\Prereqs\Game.exe")
    assert not is_game_executable("Game.exe", "/mnt/games/foo/Redist/Game.exe")
    # only whole segments count
    assert is_game_executable("Game.exe", r"C:\Games\LauncherDemo\Game.exe")


def test_in_service_folder_handles_both_separators():
    assert in_service_folder(r"C:\A\launcher\b.exe")
    assert in_service_folder("/a/LAUNCHER/b.exe")
    assert not in_service_folder("/a/b/c.exe")


def test_league_keeps_only_main_client():
    assert is_game_executable("LeagueClient.exe", LOL + r"\LeagueClient.exe")
    assert is_game_executable("leagueclient.EXE", LOL + r"\leagueclient.EXE")
    for name in ("League of Legends.exe", "RiotGamesApi.exe", "LeagueClientUx.exe"):
        assert not is_game_executable(name, LOL + "\\Game\\" + name), name


def test_riot_client_never_hosts_a_game():
    for name in ("RiotClient.exe", "Anything.exe"):
        assert not is_game_executable(name, r"C:\Riot Games\Riot Client" + "\\" + name)


def test_apex_keeps_both_renderer_builds():
    assert is_game_executable("r5apex.exe", APEX + r"\r5apex.exe")
    assert is_game_executable("R5Apex_DX12.exe", APEX + r"\R5Apex_DX12.exe")
    assert not is_game_executable("EasyAntiCheat_EOS.exe", APEX + r"\EasyAntiCheat_EOS.exe")
    assert not is_game_executable("EADesktop.exe", APEX + r"\EADesktop.exe")


def test_default_is_accept():
    assert is_game_executable("hollow_knight.exe", "/home/me/Games/Hollow Knight/hollow_knight.exe")
    assert is_game_executable("Celeste.exe", r"E:\Games\Celeste\Celeste.exe")


def test_rules_are_ordered_and_independent():
    names = [r.name for r in PUBLISHER_RULES]
    assert names == ["league-of-legends", "riot-client", "apex-legends"]
    assert matching_rule(LOL + r"\x.exe").name == "league-of-legends"
    assert matching_rule(r"C:\Riot Games\Riot Client\x.exe").name == "riot-client"
    assert matching_rule("/games/apex legends/x.exe").name == "apex-legends"
    assert matching_rule("/games/celeste/x.exe") is None
