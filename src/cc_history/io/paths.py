"""Location and naming of the conversation log tree.

Project directories under the projects root are named after the working
directory they belong to: every ``/`` becomes ``-`` and a path segment that
starts with ``.`` is written as an extra ``-`` (so ``/.config`` -> ``--config``).
"""

import os

DEFAULT_PROJECTS_DIR = os.path.join("~", ".claude", "projects")


def get_projects_dir() -> str:
    """Default projects root (~/.claude/projects), expanded."""
    return os.path.expanduser(DEFAULT_PROJECTS_DIR)


def encode_project_path(project_path: str) -> str:
    """Encode an absolute path into a project directory name."""
    return project_path.replace("/.", "//").replace("/", "-")


def decode_project_path(folder_name: str) -> str:
    """Decode a project directory name back into a path.

    The encoding is lossy (a literal ``-`` inside a segment is indistinguishable
    from a separator); callers prefer the ``cwd`` recorded in the log and use
    this only as a fallback.
    """
    body = folder_name[1:] if folder_name.startswith("-") else folder_name
    return "/" + body.replace("--", "/.").replace("-", "/")


def project_display_name(project_path: str) -> str:
    """Last path segment, e.g. /Users/me/dev/core -> core."""
    parts = [p for p in project_path.split("/") if p]
    return parts[-1] if parts else project_path


def sidechain_filename(agent_id: str) -> str:
    return f"agent-{agent_id}.jsonl"
