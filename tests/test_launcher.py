"""Tests for resume/editor process launching."""

import subprocess

import pytest

from cc_history.app import launcher


@pytest.fixture
def recorded_runs(monkeypatch):
    calls = []

    def fake_run(argv, check=False):
        calls.append(argv)
        return subprocess.CompletedProcess(argv, returncode=3)

    monkeypatch.setattr(launcher.subprocess, "run", fake_run)
    return calls


def test_build_resume_argv_splits_command():
    assert launcher.build_resume_argv("claude --verbose", "abc") == ["claude", "--verbose", "--resume", "abc"]


def test_build_editor_argv():
    assert launcher.build_editor_argv("code -w", "/tmp/x y.jsonl") == ["code", "-w", "/tmp/x y.jsonl"]


def test_resume_propagates_exit_code(recorded_runs):
    assert launcher.resume_session("sess-1", "claude") == 3
    assert recorded_runs == [["claude", "--resume", "sess-1"]]


def test_open_in_editor(recorded_runs):
    assert launcher.open_in_editor("/tmp/c.jsonl", "vi") == 3
    assert recorded_runs == [["vi", "/tmp/c.jsonl"]]


def test_missing_executable_returns_127(monkeypatch):
    def missing(argv, check=False):
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(launcher.subprocess, "run", missing)
    assert launcher.resume_session("sess-1", "no-such-claude") == 127


def test_launch_failure_returns_1(monkeypatch):
    def denied(argv, check=False):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(launcher.subprocess, "run", denied)
    assert launcher.open_in_editor("/tmp/c.jsonl", "vi") == 1
