"""CLI entry point for cc-history."""

import argparse
import logging
import sys

from cc_history.core.index import load_conversations
from cc_history.core.transcript import ConversationSummary
import cc_history.app.launcher
import cc_history.io.logging_setup
import cc_history.io.settings
from cc_history.tui.app import HistoryApp, ResumeRequest

logger = logging.getLogger(__name__)


def format_list_timestamp(timestamp: str | None) -> str:
    """Date and time only, timezone and fractions dropped."""
    if not timestamp:
        return "-"
    if "T" not in timestamp:
        return timestamp
    date, time = timestamp.split("T", 1)
    return date + " " + time.split("+")[0].split(".")[0].rstrip("Z")


def print_conversations_list(conversations: list[ConversationSummary]) -> None:
    """Print a formatted table of conversations, newest first."""
    if not conversations:
        print("No conversations found.")
        return

    print(f"Found {len(conversations)} conversation(s):\n")

    print(f"{'PROJECT':<24} {'LAST ACTIVE':<20} {'MSGS':<6} {'SESSION':<38} {'SUMMARY'}")
    print("-" * 127)

    for conv in conversations:
        summary = (conv.summary or "").replace("\n", " ")
        if len(summary) > 36:
            summary = summary[:33] + "..."
        print(
            f"{conv.project_name[:24]:<24} {format_list_timestamp(conv.last_timestamp):<20} "
            f"{conv.message_count:<6} {conv.session_id:<38} {summary}"
        )

    print()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Browse and resume Claude Code conversation history")
    parser.add_argument(
        "--projects-dir",
        type=str,
        default=None,
        help="Conversation log root (default: ~/.claude/projects)",
    )
    parser.add_argument(
        "--project",
        type=str,
        default=None,
        help="Only show conversations whose project path contains this text",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the conversation index and exit",
    )
    args = parser.parse_args(argv)

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    log_runtime = cc_history.io.logging_setup.configure()
    logger.info(
        "logging configured level=%s file=%s",
        log_runtime.level_name,
        log_runtime.file_path,
    )

    projects_dir = cc_history.io.settings.resolve_projects_dir(args.projects_dir)

    if args.list:
        print_conversations_list(load_conversations(projects_dir, args.project))
        return 0

    app = HistoryApp(
        projects_dir=projects_dir,
        project_filter=args.project,
        resume_command=cc_history.io.settings.resolve_resume_command(),
        editor=cc_history.io.settings.resolve_editor(),
    )
    # stderr log lines would draw over the TUI.
    with cc_history.io.logging_setup.suspend_console():
        result = app.run()

    if isinstance(result, ResumeRequest):
        # Terminal is restored; hand it to the resumed session.
        return cc_history.app.launcher.resume_session(result.session_id, result.command)
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
