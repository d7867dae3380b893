"""Shared style constants for CRATE."""

COLORS = {
    "accent": "#2bb3a3",
    "primary": "#e0a526",
    "highlight": "#f4d06f",
    "background": "#161616",
    "surface": "#262626",
    "muted": "#8a8a8a",
    "dim": "#5a5a5a",
    "error": "#d9534f",
}

COLOR_ACCENT = COLORS["accent"]
COLOR_PRIMARY = COLORS["primary"]
COLOR_HIGHLIGHT = COLORS["highlight"]
COLOR_BACKGROUND = COLORS["background"]
COLOR_SURFACE = COLORS["surface"]
COLOR_MUTED = COLORS["muted"]
COLOR_DIM = COLORS["dim"]
COLOR_ERROR = COLORS["error"]

PLAYING_ICON = "♪"
PAUSED_ICON = "‖"
