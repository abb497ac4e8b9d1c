"""
Panel state transitions: view mode, format, formatting and search cursor
"""

import logging
from typing import Optional

from formatters import count_json_nodes, decode_json, dump_json, format_xml, minify_xml
from models import DocumentFormat, FormatterSettings, Panel, SearchMatch, ViewMode
from search import SearchOptions, find_matches
from xml_service import XmlService

logger = logging.getLogger(__name__)


class PanelController:
    """Applies user intents to a Panel in place.

    Every operation either completes or raises before touching the panel,
    so a failed parse leaves the previous parsed data and mode intact.
    """

    def __init__(self, settings: Optional[FormatterSettings] = None,
                 xml_service: Optional[XmlService] = None):
        self.settings = settings or FormatterSettings()
        self.xml_service = xml_service or XmlService()

    @property
    def search_options(self) -> SearchOptions:
        return SearchOptions.from_settings(self.settings)

    def create_panel(self, panel_id: str) -> Panel:
        """Create an empty panel in edit mode with JSON selected"""
        return Panel(id=panel_id)

    # --- View mode and format ---

    def switch_mode(self, panel: Panel, mode: ViewMode):
        """Switch between edit and tree view.

        Entering tree view parses the raw text first; ParseError or
        MalformedXmlError propagates and the panel stays as it was.
        """
        mode = ViewMode(mode)
        if mode == panel.mode:
            return

        if mode == ViewMode.TREE:
            if panel.selected_format == DocumentFormat.JSON:
                if panel.parsed_json is None:
                    panel.parsed_json = decode_json(panel.raw_text)
            else:
                panel.parsed_xml_tree = self.xml_service.parse(panel.raw_text)

        panel.mode = mode
        self._rescan(panel)

    def set_format(self, panel: Panel, fmt: DocumentFormat):
        """Select JSON or XML, dropping parsed data from the other format"""
        fmt = DocumentFormat(fmt)
        if fmt == panel.selected_format:
            return
        panel.selected_format = fmt
        panel.parsed_json = None
        panel.parsed_xml_tree = None
        panel.mode = ViewMode.EDIT
        self._rescan(panel)

    def set_text(self, panel: Panel, text: str):
        """Replace the raw text; parsed data is stale afterwards and dropped"""
        panel.raw_text = text
        panel.parsed_json = None
        panel.parsed_xml_tree = None
        panel.mode = ViewMode.EDIT
        self._rescan(panel)

    # --- Formatting ---

    def format_document(self, panel: Panel):
        """Pretty-print the raw text according to the selected format"""
        self._rewrite(panel, compact=False)

    def minify_document(self, panel: Panel):
        """Strip insignificant whitespace from the raw text"""
        self._rewrite(panel, compact=True)

    def _rewrite(self, panel: Panel, compact: bool):
        if panel.selected_format == DocumentFormat.JSON:
            value = decode_json(panel.raw_text)
            panel.raw_text = dump_json(value, compact=compact)
            panel.parsed_json = value
        else:
            text = minify_xml(panel.raw_text) if compact else format_xml(panel.raw_text)
            # Tree view re-parses the new text, edit mode drops the stale tree
            tree = self.xml_service.parse(text) if panel.mode == ViewMode.TREE else None
            panel.raw_text = text
            panel.parsed_xml_tree = tree
        self._rescan(panel)

    def rendered_content(self, panel: Panel) -> str:
        """Text currently shown for the panel, used as the search corpus"""
        if panel.mode == ViewMode.TREE:
            if panel.selected_format == DocumentFormat.JSON:
                return dump_json(panel.parsed_json)
            if panel.parsed_xml_tree is not None:
                return self.xml_service.serialize(panel.parsed_xml_tree)
        return panel.raw_text

    # --- Search ---

    def set_search_input(self, panel: Panel, text: str):
        panel.search_input = text

    def commit_search(self, panel: Panel):
        """Make the typed search text the active query and count its matches"""
        matches = find_matches(self.rendered_content(panel), panel.search_input,
                               self.search_options)
        panel.active_search_query = panel.search_input
        panel.total_matches = len(matches)
        panel.current_match_index = 0

    def clear_search(self, panel: Panel):
        panel.search_input = ""
        panel.active_search_query = ""
        panel.total_matches = 0
        panel.current_match_index = 0

    def next_match(self, panel: Panel):
        if panel.total_matches == 0:
            return
        panel.current_match_index = (panel.current_match_index + 1) % panel.total_matches

    def previous_match(self, panel: Panel):
        if panel.total_matches == 0:
            return
        panel.current_match_index = (panel.current_match_index - 1) % panel.total_matches

    def current_match(self, panel: Panel) -> Optional[SearchMatch]:
        """Position of the match the cursor points at, if any"""
        if not panel.active_search_query or panel.total_matches == 0:
            return None
        matches = find_matches(self.rendered_content(panel), panel.active_search_query,
                               self.search_options)
        if not matches:
            return None
        return matches[min(panel.current_match_index, len(matches) - 1)]

    def _rescan(self, panel: Panel):
        """Recount the active query after the rendered content changed"""
        if not panel.active_search_query:
            panel.total_matches = 0
            panel.current_match_index = 0
            return
        panel.total_matches = len(find_matches(self.rendered_content(panel),
                                               panel.active_search_query,
                                               self.search_options))
        if panel.total_matches == 0:
            panel.current_match_index = 0
        else:
            panel.current_match_index = min(panel.current_match_index, panel.total_matches - 1)

    # --- Tree view hints and size warning ---

    def toggle_collapse_all(self, panel: Panel):
        panel.collapse_all = not panel.collapse_all

    def dismiss_large_file_warning(self, panel: Panel):
        panel.large_file_warning_enabled = False

    def document_node_count(self, panel: Panel) -> Optional[int]:
        """Node count of the parsed document, None if nothing is parsed"""
        if panel.selected_format == DocumentFormat.XML:
            if panel.parsed_xml_tree is None:
                return None
            return self.xml_service.count_nodes(panel.parsed_xml_tree)
        if panel.parsed_json is None and panel.mode != ViewMode.TREE:
            return None
        return count_json_nodes(panel.parsed_json)

    def needs_large_file_warning(self, panel: Panel) -> bool:
        """Whether the host should warn before rendering this panel's tree"""
        if not panel.large_file_warning_enabled:
            return False

        if len(panel.raw_text) > self.settings.large_file_char_threshold:
            logger.warning("Panel %s text is %d characters, above %d",
                           panel.id, len(panel.raw_text),
                           self.settings.large_file_char_threshold)
            return True

        node_count = self.document_node_count(panel)
        if node_count is not None and node_count > self.settings.large_tree_node_threshold:
            logger.warning("Panel %s document has %d nodes, above %d",
                           panel.id, node_count, self.settings.large_tree_node_threshold)
            return True

        return False
