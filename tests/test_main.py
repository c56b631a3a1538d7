"""
Smoke test of the command line entry point.
"""

from autobattler import main as entry


def test_main_runs_a_battle(capsys, mocker):
    setup = mocker.patch.object(entry, "setup_logging")
    code = entry.main(["7", "volcano"])
    assert code in (0, 1)
    setup.assert_called_once()
    out = capsys.readouterr().out
    assert "Content Repository Summary" in out
    assert "Time:" in out
