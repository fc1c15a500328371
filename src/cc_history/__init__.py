"""cc-history: browse and resume Claude Code conversation logs."""
