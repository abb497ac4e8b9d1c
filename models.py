"""
Data models for the JSON/XML formatter workspace
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


class DocumentFormat(str, Enum):
    """Format a panel's text is interpreted as"""
    JSON = "json"
    XML = "xml"


class ViewMode(str, Enum):
    """Whether a panel shows raw text or the structural tree"""
    EDIT = "edit"
    TREE = "tree"


@dataclass(frozen=True)
class TreeNode:
    """Represents one XML element and its descendants"""
    tag_name: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    children: Tuple['TreeNode', ...] = ()
    text_content: str = ""

    def __post_init__(self):
        """Post-initialization processing"""
        if not self.tag_name:
            raise ValueError("TreeNode tag_name must not be empty")
        # Copied into a read-only view so the node cannot change after construction
        object.__setattr__(self, 'attributes', MappingProxyType(dict(self.attributes)))
        # Lists are accepted for convenience but stored as a tuple
        if not isinstance(self.children, tuple):
            object.__setattr__(self, 'children', tuple(self.children))

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass
class Panel:
    """One open document: text, parsed form, view mode and search cursor"""
    id: str
    raw_text: str = ""
    parsed_json: Any = None
    parsed_xml_tree: Optional[TreeNode] = None
    mode: ViewMode = ViewMode.EDIT
    selected_format: DocumentFormat = DocumentFormat.JSON
    collapse_all: bool = False
    large_file_warning_enabled: bool = True

    # Search state
    search_input: str = ""
    active_search_query: str = ""
    current_match_index: int = 0
    total_matches: int = 0

    @property
    def has_active_search(self) -> bool:
        return bool(self.active_search_query)


@dataclass(frozen=True)
class SearchMatch:
    """A single search hit: 1-based line, 0-based column range"""
    line: int
    start: int
    end: int


@dataclass
class WorkspaceFile:
    """A document loaded from a file or pasted as a snippet"""
    id: str
    name: str
    raw: str = ""

    @classmethod
    def from_dict(cls, data):
        return cls(**data)


@dataclass
class XmlStatistics:
    """Counts gathered from a well-formed XML document"""
    element_count: int
    attribute_count: int
    text_node_count: int
    comment_count: int
    total_size: int  # UTF-8 bytes

    def __post_init__(self):
        for name in ('element_count', 'attribute_count', 'text_node_count',
                     'comment_count', 'total_size'):
            setattr(self, name, max(0, getattr(self, name)))

    def get_size_string(self) -> str:
        size = float(self.total_size)
        if size < 1024:
            return f"{self.total_size} bytes"
        for unit in ("KB", "MB"):
            size /= 1024
            if size < 1024 or unit == "MB":
                return f"{size:.1f} {unit}"

    def __str__(self):
        return (f"{self.element_count} elements, {self.attribute_count} attributes, "
                f"{self.text_node_count} text nodes, {self.comment_count} comments, "
                f"{self.get_size_string()}")


@dataclass
class FormatterSettings:
    """Formatter settings"""
    large_file_char_threshold: int = 1024 * 1024  # characters
    large_tree_node_threshold: int = 5000  # nodes
    search_case_sensitive: bool = False
    search_whole_word: bool = False
    search_use_regex: bool = False

    def __post_init__(self):
        """Post-initialization processing"""
        self.large_file_char_threshold = max(0, int(self.large_file_char_threshold))
        self.large_tree_node_threshold = max(0, int(self.large_tree_node_threshold))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FormatterSettings':
        """Build settings from a dict, ignoring unknown keys"""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
