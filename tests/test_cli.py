"""Command line tests"""

import pytest

from keeper_raffle.cli import main


@pytest.fixture(autouse=True)
def local_env(monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("LOG_FILE", raising=False)
    monkeypatch.setenv("RAFFLE_NETWORK", "localhost")


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


class TestSimulate:

    def test_runs_requested_rounds(self, capsys):
        assert main(["simulate", "--players", "3", "--rounds", "2"]) == 0

        out = capsys.readouterr().out
        assert "Round 1:" in out
        assert "Round 2:" in out
        assert "2 round(s) completed" in out

    def test_rejects_live_network(self, capsys):
        assert main(["simulate", "--network", "goerli"]) == 1
        assert "not a development network" in capsys.readouterr().out

    def test_rejects_zero_players(self):
        assert main(["simulate", "--players", "0"]) == 1


class TestStoredRaffle:

    def test_history_and_status_after_simulation(self, database_url, capsys):
        assert main(["--raffle", "cli", "simulate", "--players", "2", "--rounds", "3",
                     "--database-url", database_url]) == 0
        capsys.readouterr()

        assert main(["--raffle", "cli", "history", "--database-url", database_url, "--limit", "2"]) == 0
        history = capsys.readouterr().out
        assert "Last 2 draw(s)" in history
        assert history.count(" won ") == 2

        assert main(["--raffle", "cli", "status", "--database-url", database_url]) == 0
        status = capsys.readouterr().out
        assert "Phase: OPEN" in status
        assert "Players: 0" in status

    def test_empty_database(self, database_url, capsys):
        assert main(["history", "--database-url", database_url]) == 0
        assert "No draws recorded" in capsys.readouterr().out

        assert main(["status", "--database-url", database_url]) == 0
        assert "No state stored" in capsys.readouterr().out


class TestLogging:

    def test_log_file_receives_round_activity(self, tmp_path, monkeypatch):
        log_file = tmp_path / "logs" / "raffle.log"
        monkeypatch.setenv("LOG_FILE", str(log_file))

        assert main(["--log-level", "DEBUG", "simulate", "--players", "2"]) == 0

        contents = log_file.read_text(encoding="utf-8")
        assert "File logging enabled" in contents
        assert "Winner:" in contents
