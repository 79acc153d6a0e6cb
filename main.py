"""
main.py

StateSketch - State Diagram Editor

PyQt6 application for drawing state diagrams:
- Double-click empty canvas to add a state; hold 1/3/4/5/6 for the shape
  and Q/W/E/R/T for the color
- Shift-drag from a state (or from empty canvas) to draw a transition
- Drag transitions to curve them, drag states to move them
- Double-click or press Enter to edit a label, Escape to step back

Usage:
    python main.py

Dependencies:
    pip install PyQt6 platformdirs tomli-w
"""

from __future__ import annotations

import sys

from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import QApplication, QLabel, QMainWindow

from canvas import DiagramScene, DiagramView
from settings import SettingsManager, get_settings
from debug_trace import configure_tracing, trace, trace_exception, close_log


class MainWindow(QMainWindow):
    """Main application window for StateSketch.

    Args:
        settings_manager: The SettingsManager instance for application settings.
    """

    def __init__(self, settings_manager: SettingsManager):
        super().__init__()
        self.settings_manager = settings_manager
        self.setWindowTitle("StateSketch - State Diagram Editor")

        # Scene and view
        self.scene = DiagramScene()
        self.view = DiagramView(self.scene)
        self.setCentralWidget(self.view)

        self._mode_label = QLabel()
        self.statusBar().addPermanentWidget(self._mode_label)

        self._build_menus()

        self.scene.state.changed.connect(self._on_mode_changed)
        self._on_mode_changed(self.scene.state.mode)

    def _build_menus(self):
        """Build the application menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        exit_act = QAction("E&xit", self)
        exit_act.setShortcut(QKeySequence.StandardKey.Quit)
        exit_act.triggered.connect(self.close)
        file_menu.addAction(exit_act)

        # Edit menu (plain keys go to the canvas, so no single-key shortcuts here)
        edit_menu = menubar.addMenu("&Edit")

        delete_act = QAction("Delete Selected", self)
        delete_act.triggered.connect(self.delete_selected)
        edit_menu.addAction(delete_act)

        clear_act = QAction("Clear Diagram", self)
        clear_act.triggered.connect(self.clear_diagram)
        edit_menu.addAction(clear_act)

        # View menu
        view_menu = menubar.addMenu("&View")

        zoom_in_act = QAction("Zoom In", self)
        zoom_in_act.setShortcut(QKeySequence.StandardKey.ZoomIn)
        zoom_in_act.triggered.connect(lambda: self.view.zoom_in())
        view_menu.addAction(zoom_in_act)

        zoom_out_act = QAction("Zoom Out", self)
        zoom_out_act.setShortcut(QKeySequence.StandardKey.ZoomOut)
        zoom_out_act.triggered.connect(lambda: self.view.zoom_out())
        view_menu.addAction(zoom_out_act)

        view_menu.addSeparator()

        zoom_fit_act = QAction("Zoom to Fit", self)
        zoom_fit_act.triggered.connect(lambda: self.view.zoom_fit())
        view_menu.addAction(zoom_fit_act)

        zoom_reset_act = QAction("Actual Size", self)
        zoom_reset_act.triggered.connect(lambda: self.view.zoom_reset())
        view_menu.addAction(zoom_reset_act)

    def _on_mode_changed(self, mode: str):
        info = self.scene.state.debug_info()
        self._mode_label.setText(f"{mode} | nodes: {len(self.scene.diagram.nodes)} | edges: {len(self.scene.diagram.edges)}")
        trace(f"state {info}", "MODE")

    def delete_selected(self):
        """Delete the current selection (nodes cascade to their edges)."""
        if self.scene.dispatcher.delete_selection():
            self.statusBar().showMessage("Deleted selection.", 2000)

    def clear_diagram(self):
        self.scene.state.enter_canvas()
        self.scene.diagram.clear()
        self.scene.refresh()


def main():
    """Application entry point."""
    configure_tracing()
    trace("Application starting", "MAIN")
    app = QApplication(sys.argv)

    # Load settings (use singleton to ensure single instance)
    trace("Loading settings", "MAIN")
    settings_manager = get_settings()
    trace(f"Settings file: {settings_manager.get_settings_path()}", "MAIN")

    # Ensure settings file has all sections
    settings_manager.ensure_file_complete()

    # Save settings on application quit
    def save_on_quit():
        trace("Saving settings on quit", "MAIN")
        settings_manager.save()
        close_log()

    app.aboutToQuit.connect(save_on_quit)

    trace("Creating MainWindow", "MAIN")
    w = MainWindow(settings_manager)
    w.resize(1200, 800)
    trace("Showing MainWindow", "MAIN")
    w.show()
    trace("Entering event loop", "MAIN")
    sys.exit(app.exec())


if __name__ == "__main__":
    # Set up global exception handler to catch crashes
    def excepthook(exc_type, exc_value, exc_tb):
        import traceback
        trace("UNCAUGHT EXCEPTION:", "CRASH")
        trace("".join(traceback.format_exception(exc_type, exc_value, exc_tb)), "CRASH")
        close_log()
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = excepthook

    try:
        main()
    except Exception as e:
        trace(f"FATAL: {type(e).__name__}: {e}", "CRASH")
        trace_exception("Fatal exception")
        close_log()
        raise
