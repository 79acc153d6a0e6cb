"""
settings.py

Persistent settings management for StateSketch.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/statesketch/settings.toml
    - macOS: ~/Library/Application Support/statesketch/settings.toml
    - Linux: ~/.config/statesketch/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "statesketch"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


def set_settings(manager: Optional["SettingsManager"]) -> None:
    """Replace the global settings manager (None resets to lazy default)."""
    global _settings_manager
    _settings_manager = manager


# =============================================================================
# Canvas Settings
# =============================================================================

@dataclass
class CanvasNodeSettings:
    """Node geometry settings.

    Defaults:
        radius: 30.0
        accept_inset: 6.0
        stroke_width: 2.0
    """
    radius: float = 30.0        # Default: 30.0 pixels
    accept_inset: float = 6.0   # Default: 6.0 pixels (accept-state inner outline)
    stroke_width: float = 2.0   # Default: 2.0 pixels


@dataclass
class CanvasEdgeSettings:
    """Edge geometry and hit-test settings.

    Defaults:
        snap_padding: 6.0
        hit_padding: 6.0
        triangle_arrow_offset: 5.0
        tee_arrow_offset: 3.0
        default_color: "gray"
    """
    snap_padding: float = 6.0            # Default: 6.0 pixels
    hit_padding: float = 6.0             # Default: 6.0 pixels
    triangle_arrow_offset: float = 5.0   # Default: 5.0 pixels
    tee_arrow_offset: float = 3.0        # Default: 3.0 pixels
    default_color: str = "gray"          # Default: "gray"


@dataclass
class CanvasCaretSettings:
    """Text caret settings.

    Defaults:
        blink_ms: 500
        typing_suppress_ms: 300
    """
    blink_ms: int = 500              # Default: 500 milliseconds
    typing_suppress_ms: int = 300    # Default: 300 milliseconds after a restyle shortcut


@dataclass
class CanvasSelectionSettings:
    """Selection appearance settings.

    Defaults:
        selected_color: "#ff9500"
        multiselect_color: "#0066cc"
        idle_color: "#9ac29a"
        min_box_size: 5.0
    """
    selected_color: str = "#ff9500"      # Default: warm orange
    multiselect_color: str = "#0066cc"   # Default: blue
    idle_color: str = "#9ac29a"          # Default: engineering green
    min_box_size: float = 5.0            # Default: 5.0 pixels (smaller boxes count as a click)


@dataclass
class CanvasTextSettings:
    """Label text settings.

    Defaults:
        family: "Times New Roman"
        size_px: 20
        color: "#000000"
    """
    family: str = "Times New Roman"   # Default: "Times New Roman"
    size_px: int = 20                 # Default: 20 pixels
    color: str = "#000000"            # Default: black


@dataclass
class CanvasZoomSettings:
    """Zoom behavior settings.

    Defaults:
        wheel_factor: 1.15
    """
    wheel_factor: float = 1.15  # Default: 1.15 (15% per scroll step)


@dataclass
class CanvasSettings:
    """All canvas-related settings."""
    nodes: CanvasNodeSettings = field(default_factory=CanvasNodeSettings)
    edges: CanvasEdgeSettings = field(default_factory=CanvasEdgeSettings)
    caret: CanvasCaretSettings = field(default_factory=CanvasCaretSettings)
    selection: CanvasSelectionSettings = field(default_factory=CanvasSelectionSettings)
    text: CanvasTextSettings = field(default_factory=CanvasTextSettings)
    zoom: CanvasZoomSettings = field(default_factory=CanvasZoomSettings)


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        default_shape: Shape of nodes created without a shape modifier.
        default_color: Color of nodes created without a color modifier.
        canvas: Canvas-related settings.
    """
    default_shape: str = "dot"      # Default: "dot"
    default_color: str = "yellow"   # Default: "yellow"

    canvas: CanvasSettings = field(default_factory=CanvasSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Explicit directory override (used by tests).
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Path] = None):
        self.settings_dir = Path(settings_dir) if settings_dir else Path(platformdirs.user_config_dir(app_name))
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except (OSError, tomllib.TOMLDecodeError):
            # If file is corrupted or unreadable, return defaults
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # General section
        general = data.get("general", {})
        settings.default_shape = general.get("default_shape", settings.default_shape)
        settings.default_color = general.get("default_color", settings.default_color)

        # Canvas section
        canvas = data.get("canvas", {})
        if "nodes" in canvas:
            n = canvas["nodes"]
            settings.canvas.nodes.radius = n.get("radius", settings.canvas.nodes.radius)
            settings.canvas.nodes.accept_inset = n.get("accept_inset", settings.canvas.nodes.accept_inset)
            settings.canvas.nodes.stroke_width = n.get("stroke_width", settings.canvas.nodes.stroke_width)
        if "edges" in canvas:
            e = canvas["edges"]
            settings.canvas.edges.snap_padding = e.get("snap_padding", settings.canvas.edges.snap_padding)
            settings.canvas.edges.hit_padding = e.get("hit_padding", settings.canvas.edges.hit_padding)
            settings.canvas.edges.triangle_arrow_offset = e.get("triangle_arrow_offset", settings.canvas.edges.triangle_arrow_offset)
            settings.canvas.edges.tee_arrow_offset = e.get("tee_arrow_offset", settings.canvas.edges.tee_arrow_offset)
            settings.canvas.edges.default_color = e.get("default_color", settings.canvas.edges.default_color)
        if "caret" in canvas:
            c = canvas["caret"]
            settings.canvas.caret.blink_ms = c.get("blink_ms", settings.canvas.caret.blink_ms)
            settings.canvas.caret.typing_suppress_ms = c.get("typing_suppress_ms", settings.canvas.caret.typing_suppress_ms)
        if "selection" in canvas:
            sel = canvas["selection"]
            settings.canvas.selection.selected_color = sel.get("selected_color", settings.canvas.selection.selected_color)
            settings.canvas.selection.multiselect_color = sel.get("multiselect_color", settings.canvas.selection.multiselect_color)
            settings.canvas.selection.idle_color = sel.get("idle_color", settings.canvas.selection.idle_color)
            settings.canvas.selection.min_box_size = sel.get("min_box_size", settings.canvas.selection.min_box_size)
        if "text" in canvas:
            t = canvas["text"]
            settings.canvas.text.family = t.get("family", settings.canvas.text.family)
            settings.canvas.text.size_px = t.get("size_px", settings.canvas.text.size_px)
            settings.canvas.text.color = t.get("color", settings.canvas.text.color)
        if "zoom" in canvas:
            zm = canvas["zoom"]
            settings.canvas.zoom.wheel_factor = zm.get("wheel_factor", settings.canvas.zoom.wheel_factor)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        # Ensure directory exists
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        # Convert settings to TOML structure
        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "general": {
                "default_shape": s.default_shape,
                "default_color": s.default_color,
            },
            "canvas": {
                "nodes": {
                    "radius": s.canvas.nodes.radius,
                    "accept_inset": s.canvas.nodes.accept_inset,
                    "stroke_width": s.canvas.nodes.stroke_width,
                },
                "edges": {
                    "snap_padding": s.canvas.edges.snap_padding,
                    "hit_padding": s.canvas.edges.hit_padding,
                    "triangle_arrow_offset": s.canvas.edges.triangle_arrow_offset,
                    "tee_arrow_offset": s.canvas.edges.tee_arrow_offset,
                    "default_color": s.canvas.edges.default_color,
                },
                "caret": {
                    "blink_ms": s.canvas.caret.blink_ms,
                    "typing_suppress_ms": s.canvas.caret.typing_suppress_ms,
                },
                "selection": {
                    "selected_color": s.canvas.selection.selected_color,
                    "multiselect_color": s.canvas.selection.multiselect_color,
                    "idle_color": s.canvas.selection.idle_color,
                    "min_box_size": s.canvas.selection.min_box_size,
                },
                "text": {
                    "family": s.canvas.text.family,
                    "size_px": s.canvas.text.size_px,
                    "color": s.canvas.text.color,
                },
                "zoom": {
                    "wheel_factor": s.canvas.zoom.wheel_factor,
                },
            },
        }

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
