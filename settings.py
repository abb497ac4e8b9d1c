"""
Formatter settings persisted through QSettings
"""

import logging
from typing import Optional

from PyQt6.QtCore import QSettings

from models import FormatterSettings

logger = logging.getLogger(__name__)

ORGANIZATION = "visxml.net"
APPLICATION = "LotusFormatter"
GROUP = "formatter"


def get_settings() -> QSettings:
    return QSettings(ORGANIZATION, APPLICATION)


def _read_bool(store: QSettings, key: str, default: bool) -> bool:
    v = store.value(key)
    if v is None:
        return default
    # QSettings may store as string "true"/"false" depending on backend
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v.lower() in ("1", "true", "yes", "on")
    return bool(v)


def _read_int(store: QSettings, key: str, default: int) -> int:
    v = store.value(key)
    if v is None:
        return default
    try:
        return int(v)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid value %r for setting '%s'", v, key)
        return default


def load_settings(store: Optional[QSettings] = None) -> FormatterSettings:
    """Read formatter settings, falling back to defaults per key"""
    store = store or get_settings()
    defaults = FormatterSettings()
    store.beginGroup(GROUP)
    try:
        return FormatterSettings(
            large_file_char_threshold=_read_int(
                store, "large_file_char_threshold", defaults.large_file_char_threshold),
            large_tree_node_threshold=_read_int(
                store, "large_tree_node_threshold", defaults.large_tree_node_threshold),
            search_case_sensitive=_read_bool(
                store, "search_case_sensitive", defaults.search_case_sensitive),
            search_whole_word=_read_bool(
                store, "search_whole_word", defaults.search_whole_word),
            search_use_regex=_read_bool(
                store, "search_use_regex", defaults.search_use_regex),
        )
    finally:
        store.endGroup()


def save_settings(settings: FormatterSettings, store: Optional[QSettings] = None):
    store = store or get_settings()
    store.beginGroup(GROUP)
    try:
        for key, value in settings.to_dict().items():
            store.setValue(key, value)
    finally:
        store.endGroup()
    store.sync()
