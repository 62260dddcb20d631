import json

import pytest

from familiar import __version__
from familiar.cli import main


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FAMILIAR_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("FAMILIAR_LOG_LEVEL", raising=False)
    return tmp_path


def _state(workdir):
    return json.loads((workdir / ".familiar" / "pet.state.json").read_text())


def test_version(capsys):
    assert main(["--version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_summon_then_feed(workdir, capsys):
    assert main(["summon", "cat", "Pip"]) == 0
    assert "summoned" in capsys.readouterr().out
    assert _state(workdir)["evolution"] == 0

    assert main(["feed"]) == 0
    state = _state(workdir)
    assert state["hunger"] == 0
    # a few milliseconds of decay can truncate one point
    assert state["happiness"] in (89, 90)
    assert state["evolution"] == 1
    assert len(state["lastFeeds"]) == 1


def test_summon_refuses_second_pet(workdir, capsys):
    main(["summon", "cat", "Pip"])
    assert main(["summon", "cat", "Tom"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_commands_without_pet_fail(workdir, capsys):
    assert main(["feed"]) == 1
    assert "no familiar found" in capsys.readouterr().err


def test_status_records_visit(workdir, capsys):
    main(["summon", "cat", "Pip"])
    capsys.readouterr()
    assert main(["status"]) == 0
    out = capsys.readouterr().out
    assert "Pip is lonely" in out
    assert len(_state(workdir)["lastVisits"]) == 1

    assert main(["status", "-v"]) == 0
    assert "Hunger" in capsys.readouterr().out


def test_message_and_acknowledge(workdir, capsys):
    main(["summon", "cat", "Pip"])
    assert main(["message", "dinner", "is", "ready"]) == 0
    assert _state(workdir)["message"] == "dinner is ready"

    main(["status"])
    assert "dinner is ready" in capsys.readouterr().out

    assert main(["acknowledge", "--silent"]) == 0
    state = _state(workdir)
    assert state["message"] == ""
    assert (state["hunger"], state["happiness"], state["energy"]) == (0, 100, 100)


def test_rest_and_awaken(workdir):
    main(["summon", "cat", "Pip"])
    assert main(["rest"]) == 0
    assert _state(workdir)["isAsleep"]
    assert main(["awaken"]) == 0
    assert not _state(workdir)["isAsleep"]
    assert main(["awaken"]) == 1


def test_ossify_twice_is_an_error(workdir):
    main(["summon", "cat", "Pip"])
    assert main(["ossify"]) == 0
    assert _state(workdir)["isStone"]
    assert main(["ossify"]) == 1
    assert main(["feed"]) == 0
    assert _state(workdir)["lastFeeds"] == []


def test_dismiss_and_summon_restores(workdir, capsys):
    main(["summon", "cat", "Pip"])
    main(["feed"])
    assert main(["dismiss"]) == 0
    assert not (workdir / ".familiar" / "pet.state.json").exists()

    assert main(["summon"]) == 0
    assert "restored" in capsys.readouterr().out
    assert _state(workdir)["evolution"] == 1


def test_summon_by_name_restores_that_pet(workdir, capsys):
    main(["summon", "cat", "Pip"])
    main(["dismiss"])
    main(["summon", "dancer", "Zed"])
    main(["dismiss"])
    capsys.readouterr()
    assert main(["summon", "pip"]) == 0
    assert "restored" in capsys.readouterr().out
    config = json.loads((workdir / ".familiar" / "pet.json").read_text())
    assert config["name"] == "Pip"


def test_banish(workdir):
    main(["summon", "cat", "Pip"])
    assert main(["banish"]) == 0
    assert not any((workdir / ".familiar").iterdir())


def test_global_pet_found_from_anywhere(workdir, capsys):
    assert main(["summon", "--global", "cat", "Far"]) == 0
    assert (workdir / "home" / ".familiar" / "pet.state.json").exists()
    capsys.readouterr()
    assert main(["status"]) == 0
    assert "Far is" in capsys.readouterr().out


def test_admin_health_prints_glyph(workdir, capsys):
    main(["summon", "cat", "Pip"])
    capsys.readouterr()
    assert main(["admin", "health"]) == 0
    assert "●" in capsys.readouterr().out


def test_admin_art(workdir, capsys):
    assert main(["admin", "art", "list", "--type", "cat"]) == 0
    out = capsys.readouterr().out
    assert "lonely+hungry" in out
    assert main(["admin", "art", "sad", "--type", "cat"]) == 0
    assert "( T.T )" in capsys.readouterr().out
    assert main(["admin", "art", "nonsense", "--type", "cat"]) == 1


def test_bracketed_name_is_printed_literally(workdir, capsys):
    assert main(["summon", "cat", "[/bold]"]) == 0
    assert "[/bold]" in capsys.readouterr().out
    assert main(["status"]) == 0
    assert "[/bold] is" in capsys.readouterr().out
    assert main(["rest"]) == 0
    assert main(["feed"]) == 0
    assert "[/bold] is asleep" in capsys.readouterr().out


def test_admin_update_refreshes_animations(workdir, capsys):
    main(["summon", "cat", "Pip"])
    config_path = workdir / ".familiar" / "pet.json"
    config = json.loads(config_path.read_text())
    del config["animations"]["asleep"]
    config["decayRate"] = 2.5
    config["sleepDuration"] = "1h"
    config_path.write_text(json.dumps(config))
    capsys.readouterr()

    assert main(["admin", "update"]) == 0
    assert "updated from cat template" in capsys.readouterr().out
    config = json.loads(config_path.read_text())
    assert "asleep" in config["animations"]
    assert config["decayRate"] == 2.5
    assert config["sleepDuration"] == "1h"
    assert config["name"] == "Pip"


def test_admin_update_to_other_type(workdir):
    main(["summon", "cat", "Pip"])
    main(["feed"])
    assert main(["admin", "update", "dancer"]) == 0
    config = json.loads((workdir / ".familiar" / "pet.json").read_text())
    assert config["petType"] == "dancer"
    assert config["animations"]["default"]["fps"] == 3
    assert _state(workdir)["evolution"] == 1
    assert main(["admin", "update", "dragon"]) == 1


def test_corrupt_config_points_to_banish(workdir, capsys):
    main(["summon", "cat", "Pip"])
    (workdir / ".familiar" / "pet.json").write_text("{oops")
    capsys.readouterr()
    assert main(["feed"]) == 1
    assert "banish" in capsys.readouterr().err

    assert main(["banish"]) == 0
    assert not (workdir / ".familiar" / "pet.state.json").exists()
    assert main(["summon", "cat", "Pip"]) == 0
