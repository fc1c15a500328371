"""Pytest configuration and shared fixtures for cc-history tests."""

from pathlib import Path

import pytest

from tests.harness.builders import (
    assistant_event,
    summary_event,
    text_block,
    thinking_block,
    tool_result_event,
    tool_use_block,
    user_event,
    write_conversation,
    write_sidechain,
)

WEBAPP = "/home/dev/webapp"
DOTFILES = "/home/dev/.dotfiles"


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep settings, logs and editor choice out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("CC_HISTORY_LOG_DIR", str(tmp_path / "logs"))
    for name in ("CC_HISTORY_PROJECTS_DIR", "CC_HISTORY_LOG_FILE", "CC_HISTORY_LOG_LEVEL",
                 "VISUAL", "EDITOR"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Project trees
# ---------------------------------------------------------------------------

@pytest.fixture
def projects_dir(tmp_path) -> Path:
    """Empty projects root."""
    root = tmp_path / "projects"
    root.mkdir()
    return root


@pytest.fixture
def sample_projects(projects_dir) -> Path:
    """Two listed conversations, one sidechain and one warm-up probe.

    sess-new (webapp) messages, by stream index:
        0 user "Please fix the login bug"
        1 assistant thinking + Task tool_use    <- linked to agent abc123
        2 assistant "Fixed it."
        3 user "thanks"
        4 assistant "You're welcome"
    """
    new = write_conversation(projects_dir, WEBAPP, "sess-new", [
        summary_event("Fix the login bug"),
        user_event("Please fix the login bug", timestamp="2026-03-02T09:00:00Z",
                   session_id="sess-new", cwd=WEBAPP),
        assistant_event([thinking_block("where is it"),
                         tool_use_block("Task", {"prompt": "find the login code"})],
                        timestamp="2026-03-02T09:00:05Z", session_id="sess-new"),
        tool_result_event(agent_id="abc123", timestamp="2026-03-02T09:01:00Z", session_id="sess-new"),
        assistant_event("Fixed it.", timestamp="2026-03-02T09:01:05Z", session_id="sess-new"),
        user_event("thanks", timestamp="2026-03-02T09:02:00Z", session_id="sess-new"),
        assistant_event("You're welcome", timestamp="2026-03-02T09:02:05Z", session_id="sess-new"),
    ])
    write_sidechain(new, "abc123", [
        user_event("find the login code", session_id="sess-new"),
        assistant_event([text_block("Found it in auth.py")], session_id="sess-new"),
    ])

    write_conversation(projects_dir, DOTFILES, "sess-old", [
        user_event("old question", timestamp="2026-02-01T08:00:00Z", session_id="sess-old", cwd=DOTFILES),
        assistant_event("old answer", timestamp="2026-02-01T08:00:03Z", session_id="sess-old"),
    ])

    write_conversation(projects_dir, DOTFILES, "sess-warmup", [
        user_event("Warmup", timestamp="2026-03-05T08:00:00Z", session_id="sess-warmup", cwd=DOTFILES),
        assistant_event("Ready.", timestamp="2026-03-05T08:00:01Z", session_id="sess-warmup"),
    ])
    return projects_dir


@pytest.fixture
def sample_conversation(sample_projects) -> Path:
    return sample_projects / "-home-dev-webapp" / "sess-new.jsonl"
