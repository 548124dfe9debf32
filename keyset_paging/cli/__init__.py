"""Command line tools for inspecting pagination cursors."""
