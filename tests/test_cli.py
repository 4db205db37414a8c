"""CLI tests for histdb via Click's CliRunner.

Each test builds a throwaway git repository and a file-backed destination
database, so the default paths (``.`` and ``git_info.db``) get exercised too.
"""

from __future__ import annotations

import os
import sqlite3

import pytest
from click.testing import CliRunner

from histdb.cli import cli
from histdb.models.config import DEFAULT_DB_PATH

from tests.conftest import git_commit, remove_object


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


def _rows(db_path: str, sql: str) -> list[tuple]:
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


class TestEndToEnd:
    def test_single_root_commit_on_main(self, runner, git_repo, tmp_path):
        a = git_commit(git_repo, "init", author="alice")
        db_path = str(tmp_path / "out.db")

        result = runner.invoke(cli, [git_repo.working_dir, db_path])

        assert result.exit_code == 0, result.output
        assert _rows(db_path, "SELECT id, author, message FROM commit_details") == [
            (a.hexsha, "alice", "init")
        ]
        assert _rows(db_path, "SELECT * FROM commit_relation") == []
        assert _rows(db_path, "SELECT name, id, kind FROM ref_details") == [
            ("refs/heads/main", a.hexsha, "Direct")
        ]

    def test_status_lines(self, runner, git_repo, tmp_path):
        git_commit(git_repo, "init")
        db_path = str(tmp_path / "out.db")

        result = runner.invoke(cli, [git_repo.working_dir, db_path])

        assert result.exit_code == 0, result.output
        assert "Database and tables created successfully!" in result.output
        out = result.output
        assert out.index("Getting Commit Details...") < out.index("Getting Ref Details...")
        assert out.count("Done!") == 2

    def test_defaults_use_cwd_and_default_db(self, runner, git_repo, monkeypatch):
        git_commit(git_repo, "init")
        monkeypatch.chdir(git_repo.working_dir)

        result = runner.invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert os.path.exists(DEFAULT_DB_PATH)
        assert _rows(DEFAULT_DB_PATH, "SELECT COUNT(*) FROM commit_details") == [(1,)]

    def test_merge_history_edge_count(self, runner, git_repo, tmp_path):
        root = git_commit(git_repo, "root", date=1_700_000_000)
        left = git_commit(git_repo, "left", date=1_700_000_100, parents=[root])
        right = git_commit(git_repo, "right", date=1_700_000_050, parents=[root], head=False)
        merge = git_commit(git_repo, "merge", date=1_700_000_200, parents=[left, right])
        db_path = str(tmp_path / "out.db")

        result = runner.invoke(cli, [git_repo.working_dir, db_path, "--chunk-size", "1"])

        assert result.exit_code == 0, result.output
        assert _rows(db_path, "SELECT COUNT(*) FROM commit_details") == [(4,)]
        assert _rows(
            db_path,
            f"SELECT parent FROM commit_relation WHERE child = '{merge.hexsha}' ORDER BY parent",
        ) == sorted([(left.hexsha,), (right.hexsha,)])
        assert _rows(db_path, "SELECT COUNT(*) FROM commit_relation") == [(4,)]


class TestFailures:
    def test_unreadable_ancestor_is_skipped(self, runner, git_repo, tmp_path):
        a = git_commit(git_repo, "a", date=1_700_000_000)
        b = git_commit(git_repo, "b", date=1_700_000_100, parents=[a])
        c = git_commit(git_repo, "c", date=1_700_000_200, parents=[b])
        remove_object(git_repo, b.hexsha)
        db_path = str(tmp_path / "out.db")

        result = runner.invoke(cli, [git_repo.working_dir, db_path])

        assert result.exit_code == 0, result.output
        assert "Skipped 1 commits" in result.output
        assert _rows(db_path, "SELECT id FROM commit_details") == [(c.hexsha,)]
        assert _rows(db_path, "SELECT parent, child FROM commit_relation") == [
            (b.hexsha, c.hexsha)
        ]
        assert _rows(db_path, "SELECT name, id FROM ref_details") == [
            ("refs/heads/main", c.hexsha)
        ]

    def test_second_run_fails_with_conflict(self, runner, git_repo, tmp_path):
        git_commit(git_repo, "init")
        db_path = str(tmp_path / "out.db")

        first = runner.invoke(cli, [git_repo.working_dir, db_path])
        second = runner.invoke(cli, [git_repo.working_dir, db_path])

        assert first.exit_code == 0, first.output
        assert second.exit_code == 1
        assert "Error:" in second.output
        assert "commit_details" in second.output
        assert "Database and tables created successfully!" not in second.output
        assert _rows(db_path, "SELECT COUNT(*) FROM commit_details") == [(1,)]

    def test_not_a_repository(self, runner, tmp_path):
        db_path = str(tmp_path / "out.db")

        result = runner.invoke(cli, [str(tmp_path), db_path])

        assert result.exit_code == 1
        assert "not a git repository" in result.output
        assert not os.path.exists(db_path)

    def test_unopenable_destination(self, runner, git_repo, tmp_path):
        git_commit(git_repo, "init")
        db_path = str(tmp_path / "no-such-dir" / "out.db")

        result = runner.invoke(cli, [git_repo.working_dir, db_path])

        assert result.exit_code == 1
        assert "Failed to open database" in result.output

    def test_invalid_chunk_size(self, runner, git_repo, tmp_path):
        result = runner.invoke(
            cli, [git_repo.working_dir, str(tmp_path / "out.db"), "--chunk-size", "0"]
        )
        assert result.exit_code == 2


class TestOptions:
    def test_verbose_prints_chunks(self, runner, git_repo, tmp_path):
        for i in range(3):
            git_commit(git_repo, f"c{i}", date=1_700_000_000 + i)
        db_path = str(tmp_path / "out.db")

        result = runner.invoke(
            cli, [git_repo.working_dir, db_path, "--chunk-size", "2", "-v"]
        )

        assert result.exit_code == 0, result.output
        assert "commits chunk 1: 2 records" in result.output
        assert "commits chunk 2: 1 records" in result.output

    def test_chunk_size_from_env(self, runner, git_repo, tmp_path):
        for i in range(3):
            git_commit(git_repo, f"c{i}", date=1_700_000_000 + i)
        db_path = str(tmp_path / "out.db")

        result = runner.invoke(
            cli,
            [git_repo.working_dir, db_path, "-v"],
            env={"HISTDB_CHUNK_SIZE": "1"},
        )

        assert result.exit_code == 0, result.output
        assert "commits chunk 3: 1 records" in result.output

    @pytest.mark.parametrize("order", ["default", "topo", "date"])
    def test_orders(self, runner, git_repo, tmp_path, order):
        for i in range(2):
            git_commit(git_repo, f"c{i}", date=1_700_000_000 + i)
        db_path = str(tmp_path / f"{order}.db")

        result = runner.invoke(cli, [git_repo.working_dir, db_path, "--order", order])

        assert result.exit_code == 0, result.output
        assert _rows(db_path, "SELECT COUNT(*) FROM commit_details") == [(2,)]

    def test_url_overrides_db_path(self, runner, git_repo, tmp_path):
        git_commit(git_repo, "init")
        url_path = tmp_path / "via-url.db"

        result = runner.invoke(
            cli,
            [git_repo.working_dir, str(tmp_path / "ignored.db"), "--url", f"sqlite:///{url_path}"],
        )

        assert result.exit_code == 0, result.output
        assert not (tmp_path / "ignored.db").exists()
        assert _rows(str(url_path), "SELECT COUNT(*) FROM ref_details") == [(1,)]
