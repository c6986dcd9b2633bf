"""AI repository editor: chat-driven line edits committed to a Git repository."""

__version__ = "0.1.0"
