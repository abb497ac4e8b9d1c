"""
Workspace manager - the ordered set of open panels and the active panel
"""

import logging
import uuid
from dataclasses import fields
from typing import Callable, List, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from models import Panel
from panel_controller import PanelController

logger = logging.getLogger(__name__)

MAX_PANELS = 3

_UPDATABLE_FIELDS = frozenset(f.name for f in fields(Panel)) - {'id'}


def _new_panel_id() -> str:
    return str(uuid.uuid4())


class WorkspaceManager(QObject):
    """Owns the panels in tab order and tracks which one is active.

    Lookups by id never fail: an id that no longer exists is ignored,
    since the UI may act on a panel that was just closed.
    """
    panel_added = pyqtSignal(str)
    panel_removed = pyqtSignal(str)
    panel_updated = pyqtSignal(str)
    active_panel_changed = pyqtSignal(object)  # panel id or None

    def __init__(self, controller: Optional[PanelController] = None,
                 id_factory: Callable[[], str] = _new_panel_id, parent=None):
        super().__init__(parent)
        self.controller = controller or PanelController()
        self._id_factory = id_factory
        self._panels: List[Panel] = []
        self._active_panel_id: Optional[str] = None

    @property
    def panels(self) -> Tuple[Panel, ...]:
        return tuple(self._panels)

    @property
    def active_panel_id(self) -> Optional[str]:
        return self._active_panel_id

    @property
    def active_panel(self) -> Optional[Panel]:
        if self._active_panel_id is None:
            return None
        return self.get_panel(self._active_panel_id)

    @property
    def panel_count(self) -> int:
        return len(self._panels)

    @property
    def can_add_panel(self) -> bool:
        return len(self._panels) < MAX_PANELS

    def get_panel(self, panel_id: str) -> Optional[Panel]:
        for p in self._panels:
            if p.id == panel_id:
                return p
        return None

    def _index_of(self, panel_id: str) -> int:
        for i, p in enumerate(self._panels):
            if p.id == panel_id:
                return i
        return -1

    def _set_active(self, panel_id: Optional[str]):
        if panel_id == self._active_panel_id:
            return
        self._active_panel_id = panel_id
        logger.info("Active panel: %s", panel_id)
        self.active_panel_changed.emit(panel_id)

    def add_panel(self) -> Optional[Panel]:
        """Open a new empty panel and make it active; None when full"""
        if not self.can_add_panel:
            logger.debug("Panel limit of %d reached", MAX_PANELS)
            return None

        panel = self.controller.create_panel(self._id_factory())
        self._panels.append(panel)
        logger.info("Added panel %s (%d open)", panel.id, len(self._panels))
        self.panel_added.emit(panel.id)
        self._set_active(panel.id)
        return panel

    def remove_panel(self, panel_id: str):
        """Close a panel; an active panel hands focus to its closest neighbor"""
        index = self._index_of(panel_id)
        if index == -1:
            return

        del self._panels[index]
        logger.info("Removed panel %s (%d open)", panel_id, len(self._panels))
        self.panel_removed.emit(panel_id)

        if self._active_panel_id == panel_id:
            if not self._panels:
                self._set_active(None)
            else:
                # Same position if something slid into it, else the new last panel
                new_index = min(index, len(self._panels) - 1)
                self._set_active(self._panels[new_index].id)

    def set_active_panel(self, panel_id: str):
        if self._index_of(panel_id) != -1:
            self._set_active(panel_id)

    def update_panel(self, panel_id: str, **updates):
        """Merge known Panel fields into an existing panel"""
        panel = self.get_panel(panel_id)
        if panel is None:
            return

        unknown = set(updates) - _UPDATABLE_FIELDS
        if unknown:
            logger.debug("Ignoring unknown panel fields: %s", sorted(unknown))

        for name, value in updates.items():
            if name in _UPDATABLE_FIELDS:
                setattr(panel, name, value)
        self.panel_updated.emit(panel_id)

    def initialize(self):
        """Make sure at least one panel is open"""
        if not self._panels:
            self.add_panel()
