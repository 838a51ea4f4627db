"""Game rules, scene files, PNG and chunk helpers for CyberSauras Dash."""

__version__ = "0.1.0"

__all__ = ["chunks", "png", "scene", "game", "viewer"]