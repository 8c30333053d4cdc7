"""
Tests for the collaborators around the engine: Config, StateStore and the
git layer (with subprocess faked out).

Run with:
    pytest tests/test_storage.py -v
"""

import json
import logging
import os
import subprocess
from datetime import datetime, timedelta

import pytest

from vercommit.config import Config, ConfigManager
from vercommit.convention import SemanticVersion, can_amend, default_rule_set
from vercommit.git import GitError, GitRepository, MAX_MESSAGE_LENGTH, sanitize_commit_message
from vercommit.state import StateStore


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    monkeypatch.delenv("VC_CONFIG", raising=False)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

class TestConfig:

    def test_defaults(self):
        config = Config()
        assert config.project_name == "My Project"
        assert config.main_branch == "main"
        assert config.rule_set == default_rule_set()

    def test_from_dict_nested_layout(self):
        config = Config.from_dict({
            "projectName": "Git Flow Master",
            "commit": {"rules": {"subjectMaxLength": 80}},
            "branch": {"mainBranch": "trunk"},
            "hooks": {"preCommit": {"enabled": True}},
        })
        assert config.project_name == "Git Flow Master"
        assert config.main_branch == "trunk"
        assert config.develop_branch == "develop"
        assert config.rule_set.subject_max_length == 80

    def test_rule_set_is_fresh_each_time(self):
        config = Config()
        assert config.rule_set is not config.rule_set

    def test_validate_invalid_project_name(self):
        config = Config(project_name="   ")
        warnings = config.validate()
        assert len(warnings) == 1
        assert config.project_name == "My Project"

    def test_validate_collects_rule_warnings(self):
        config = Config(commit={"rules": {"bodyLineLength": "wide"}})
        warnings = config.validate()
        assert any("body_line_length" in w for w in warnings)

    def test_validate_valid_config_no_warnings(self):
        assert Config().validate() == []

    def test_from_dict_logs_warnings(self, caplog):
        with caplog.at_level(logging.WARNING, logger="vercommit.config"):
            Config.from_dict({"commit": {"amend": {"maxAmends": -1}}})
        assert "Config warning" in caplog.text

    def test_from_dict_branch_not_an_object(self, caplog):
        with caplog.at_level(logging.WARNING, logger="vercommit.config"):
            config = Config.from_dict({"projectName": "Tools", "branch": "main"})
        assert config.project_name == "Tools"
        assert config.main_branch == "main"
        assert config.develop_branch == "develop"
        assert "Invalid branch section" in caplog.text

    def test_from_dict_drops_unhashable_amend_types(self, caplog):
        with caplog.at_level(logging.WARNING, logger="vercommit.config"):
            config = Config.from_dict({"commit": {"amend": {"allowedForTypes": [["PATCH"], "PATCH"]}}})
        assert config.rule_set.amend.allowed_for_types == frozenset({"PATCH"})
        assert "allowedForTypes" in caplog.text

    def test_to_dict_uses_camel_case(self):
        data = Config().to_dict()
        assert data["projectName"] == "My Project"
        assert data["commit"]["rules"]["subjectMinLength"] == 10
        assert data["branch"]["developBranch"] == "develop"


class TestConfigManager:

    def test_load_returns_defaults_when_no_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        config = ConfigManager().load()
        assert config.project_name == "My Project"

    def test_load_reads_local_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".vcrc").write_text(json.dumps({"projectName": "Local"}))
        manager = ConfigManager()
        assert manager.load().project_name == "Local"
        assert manager.get_config_path() == tmp_path / ".vcrc"

    def test_load_file_with_malformed_sections(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".vcrc").write_text(json.dumps({
            "projectName": "Local",
            "branch": "main",
            "commit": {"amend": {"allowedForTypes": [["PATCH"]]}},
        }))
        config = ConfigManager().load()
        assert config.project_name == "Local"
        assert config.main_branch == "main"
        assert config.rule_set.amend.allowed_for_types == frozenset()

    def test_env_var_wins(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".vcrc").write_text(json.dumps({"projectName": "Local"}))
        explicit = tmp_path / "team.json"
        explicit.write_text(json.dumps({"projectName": "Team"}))
        monkeypatch.setenv("VC_CONFIG", str(explicit))
        assert ConfigManager().load().project_name == "Team"

    def test_save_and_load_roundtrip(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path)

        path = ConfigManager().save(Config(project_name="Saved"), global_config=True)
        assert path == tmp_path / ".vcrc"
        if os.name == "posix":
            assert (path.stat().st_mode & 0o777) == 0o600

        loaded = ConfigManager().load()
        assert loaded.project_name == "Saved"
        assert loaded.rule_set == default_rule_set()

    def test_malformed_json_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".vcrc").write_text("not valid json {{{")
        assert ConfigManager().load().project_name == "My Project"

    def test_non_object_json_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".vcrc").write_text("[1, 2, 3]")
        assert ConfigManager().load().project_name == "My Project"


# ---------------------------------------------------------------------------
# StateStore
# ---------------------------------------------------------------------------

class TestStateStore:

    REPO = "/work/repo"
    NOON = datetime(2024, 5, 1, 12, 0)

    @pytest.fixture
    def store(self, tmp_path):
        return StateStore(tmp_path / "state" / "state.json")

    def test_empty_when_missing(self, store):
        assert store.load() == {"repositories": {}}
        assert store.get(self.REPO) is None

    def test_corrupt_file_falls_back(self, store, caplog):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{oops")
        with caplog.at_level(logging.WARNING, logger="vercommit.state"):
            assert store.load() == {"repositories": {}}
        assert "Could not read state" in caplog.text

    def test_record_commit(self, store):
        store.record_commit(self.REPO, "UPDATE", self.NOON)
        entry = store.get(self.REPO)
        assert entry["lastCommitType"] == "UPDATE"
        assert entry["lastCommitAt"] == self.NOON.isoformat()

    def test_amend_count_increments_same_day(self, store):
        store.record_amend(self.REPO, "PATCH", self.NOON)
        store.record_amend(self.REPO, "PATCH", self.NOON + timedelta(hours=1))
        assert store.amend_count_today(self.REPO, self.NOON) == 2

    def test_amend_count_restarts_next_day(self, store):
        store.record_amend(self.REPO, "PATCH", self.NOON)
        store.record_amend(self.REPO, "PATCH", self.NOON)
        tomorrow = self.NOON + timedelta(days=1)
        assert store.amend_count_today(self.REPO, tomorrow) == 0
        store.record_amend(self.REPO, "PATCH", tomorrow)
        assert store.amend_count_today(self.REPO, tomorrow) == 1

    def test_amend_context_from_store(self, store):
        store.record_commit(self.REPO, "PATCH", self.NOON)
        context = store.amend_context(self.REPO, "PATCH", now=self.NOON + timedelta(hours=2))
        assert context.previous_type == "PATCH"
        assert context.previous_timestamp == self.NOON
        assert context.amend_count_today == 0
        assert can_amend(context, default_rule_set()).allowed

    def test_amend_context_overrides(self, store):
        git_time = self.NOON - timedelta(days=2)
        context = store.amend_context(self.REPO, "PATCH", now=self.NOON,
                                      previous_type="UPDATE", previous_timestamp=git_time)
        assert context.previous_type == "UPDATE"
        assert can_amend(context, default_rule_set()).reason == "not same day"

    def test_amend_context_unknown_repo(self, store):
        assert store.amend_context(self.REPO, "PATCH") is None

    def test_limit_reached_through_store(self, store):
        for _ in range(10):
            store.record_amend(self.REPO, "PATCH", self.NOON)
        context = store.amend_context(self.REPO, "PATCH", now=self.NOON)
        assert can_amend(context, default_rule_set()).reason == "amend limit reached"

    def test_reset(self, store):
        store.record_commit(self.REPO, "PATCH", self.NOON)
        store.reset(self.REPO)
        assert store.get(self.REPO) is None

    def test_file_is_private(self, store):
        store.record_commit(self.REPO, "PATCH", self.NOON)
        if os.name == "posix":
            assert (store.path.stat().st_mode & 0o777) == 0o600


# ---------------------------------------------------------------------------
# Git layer
# ---------------------------------------------------------------------------

class TestSanitizeCommitMessage:

    def test_strips_control_characters(self):
        assert sanitize_commit_message("PATCH: P - v1.0.0\x00\x07\n\n\tbody") == "PATCH: P - v1.0.0\n\n\tbody"

    def test_normalizes_crlf(self):
        assert sanitize_commit_message("a\r\nb") == "a\nb"

    def test_too_long(self):
        with pytest.raises(ValueError):
            sanitize_commit_message("x" * (MAX_MESSAGE_LENGTH + 1))

    @pytest.mark.parametrize("value", ["", None])
    def test_empty(self, value):
        with pytest.raises(ValueError):
            sanitize_commit_message(value)


class FakeGit:
    """Stands in for subprocess.run; answers by git subcommand."""

    def __init__(self, responses=None, fail=()):
        self.responses = responses or {}
        self.fail = set(fail)
        self.calls = []

    def __call__(self, cmd, **kwargs):
        args = cmd[1:]
        self.calls.append(args)
        key = args[0]
        if key in self.fail or tuple(args[:2]) in self.fail:
            raise subprocess.CalledProcessError(128, cmd, stderr="fatal: boom")
        output = self.responses.get(tuple(args[:2]), self.responses.get(key, ""))
        return subprocess.CompletedProcess(cmd, 0, stdout=output, stderr="")


class TestGitRepository:

    def _repo(self, monkeypatch, **kwargs):
        fake = FakeGit(**kwargs)
        monkeypatch.setattr("vercommit.git.repository.subprocess.run", fake)
        return GitRepository(), fake

    def test_not_in_repo(self, monkeypatch):
        monkeypatch.setattr("vercommit.git.repository.subprocess.run", FakeGit(fail={("rev-parse", "--git-dir")}))
        with pytest.raises(GitError, match="Not inside a git repository"):
            GitRepository()

    def test_git_missing(self, monkeypatch):
        def missing(*args, **kwargs):
            raise FileNotFoundError("git")
        monkeypatch.setattr("vercommit.git.repository.subprocess.run", missing)
        with pytest.raises(GitError, match="not installed"):
            GitRepository()

    def test_latest_version_is_highest(self, monkeypatch):
        subjects = "PATCH: App - v1.2.1\nchore: tidy\nUPDATE: App - v1.3.0\nPATCH: App - v1.2.0\n"
        repo, _ = self._repo(monkeypatch, responses={"log": subjects})
        assert repo.latest_version(default_rule_set()) == SemanticVersion(1, 3, 0)

    def test_latest_version_without_history(self, monkeypatch):
        repo, _ = self._repo(monkeypatch, fail={("rev-parse", "--verify")})
        assert repo.latest_version(default_rule_set()) is None

    def test_head_timestamp(self, monkeypatch):
        repo, _ = self._repo(monkeypatch, responses={"log": "2024-05-01T10:00:00+02:00\n"})
        assert repo.head_timestamp() == datetime.fromisoformat("2024-05-01T10:00:00+02:00")

    def test_head_timestamp_garbage(self, monkeypatch):
        repo, _ = self._repo(monkeypatch, responses={"log": "yesterday"})
        with pytest.raises(GitError):
            repo.head_timestamp()

    def test_commit_passes_sanitized_message(self, monkeypatch):
        repo, fake = self._repo(monkeypatch)
        repo.commit("PATCH: App - v1.0.1\x00\n")
        assert fake.calls[-1] == ["commit", "-m", "PATCH: App - v1.0.1"]

    def test_amend(self, monkeypatch):
        repo, fake = self._repo(monkeypatch)
        repo.amend("PATCH: App - v1.0.1")
        assert fake.calls[-1] == ["commit", "--amend", "-m", "PATCH: App - v1.0.1"]

    def test_command_failure_raises(self, monkeypatch):
        repo, _ = self._repo(monkeypatch, fail={"commit"})
        with pytest.raises(GitError, match="boom"):
            repo.commit("PATCH: App - v1.0.1")

    def test_path_uses_dash_c(self, monkeypatch):
        fake = FakeGit()
        monkeypatch.setattr("vercommit.git.repository.subprocess.run", fake)
        GitRepository(path="/tmp/work").root()
        assert fake.calls[-1][:2] == ["-C", "/tmp/work"]

    def test_latest_tag(self, monkeypatch):
        repo, fake = self._repo(monkeypatch, responses={("describe", "--tags"): "v1.2.3\n"})
        assert repo.latest_tag() == "v1.2.3"
        assert fake.calls[-1] == ["describe", "--tags", "--abbrev=0"]

    def test_latest_tag_none_when_untagged(self, monkeypatch):
        repo, _ = self._repo(monkeypatch, fail={("describe", "--tags")})
        assert repo.latest_tag() is None
        assert repo.tagged_version() is None

    @pytest.mark.parametrize("tag, expected", [
        ("v2.0.0", SemanticVersion(2, 0, 0)),
        ("1.4.0", SemanticVersion(1, 4, 0)),
        ("nightly", None),
    ])
    def test_tagged_version(self, monkeypatch, tag, expected):
        repo, _ = self._repo(monkeypatch, responses={("describe", "--tags"): tag})
        assert repo.tagged_version() == expected

    def test_subjects_since_tag(self, monkeypatch):
        repo, fake = self._repo(monkeypatch, responses={("log", "v1.2.3..HEAD"): "PATCH: App - v1.2.4\n\nwip\n"})
        assert repo.subjects_since("v1.2.3") == ["PATCH: App - v1.2.4", "wip"]
        assert fake.calls[-1] == ["log", "v1.2.3..HEAD", "--format=%s"]

    def test_subjects_since_without_tag_reads_all_of_head(self, monkeypatch):
        repo, fake = self._repo(monkeypatch, responses={("log", "HEAD"): "UPDATE: App - v0.2.0\n"})
        assert repo.subjects_since(None) == ["UPDATE: App - v0.2.0"]
        assert fake.calls[-1][:2] == ["log", "HEAD"]

    def test_subjects_since_empty_repo(self, monkeypatch):
        repo, _ = self._repo(monkeypatch, fail={("rev-parse", "--verify")})
        assert repo.subjects_since(None) == []

    def test_create_tag_annotated(self, monkeypatch):
        repo, fake = self._repo(monkeypatch)
        repo.create_tag("v1.3.0", "Release 1.3.0")
        assert fake.calls[-1] == ["tag", "-a", "v1.3.0", "-m", "Release 1.3.0"]

    def test_create_tag_refuses_existing(self, monkeypatch):
        repo, fake = self._repo(monkeypatch, responses={("tag", "--list"): "v1.3.0\n"})
        with pytest.raises(GitError, match="already exists"):
            repo.create_tag("v1.3.0", "Release 1.3.0")
        assert ["tag", "-a", "v1.3.0", "-m", "Release 1.3.0"] not in fake.calls
