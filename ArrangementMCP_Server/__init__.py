"""ArrangementMCP server: clip transforms for the Ableton Live arrangement."""

__version__ = "0.1.0"
