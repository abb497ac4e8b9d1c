"""
XML Service - strict XML parsing into TreeNode and serialization back to text
"""

import logging
import re
from typing import Dict, Iterator, List, Optional
from xml.sax.saxutils import escape

from lxml import etree

from errors import MalformedXmlError
from models import TreeNode, XmlStatistics

logger = logging.getLogger(__name__)

INDENT = "  "

_XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
_COMMENT_PATTERN = re.compile(r'<!--.*?-->', re.DOTALL)
_ATTRIBUTE_ENTITIES = {'"': '&quot;', '\n': '&#10;', '\r': '&#13;', '\t': '&#9;'}


def iter_nodes(node: TreeNode) -> Iterator[TreeNode]:
    """Yield node and all its descendants in document order"""
    pending = [node]
    while pending:
        current = pending.pop()
        yield current
        pending.extend(reversed(current.children))


class XmlService:
    """Service for XML tree operations"""

    def __init__(self):
        # Comments and PIs are dropped at parse time; entities and network stay off.
        # huge_tree lifts libxml2's text node and nesting limits
        self._parser = etree.XMLParser(
            remove_comments=True,
            remove_pis=True,
            resolve_entities=False,
            no_network=True,
            huge_tree=True,
            encoding='utf-8',
        )

    def parse(self, xml_content: str) -> TreeNode:
        """Parse XML content into a TreeNode rooted at the document element"""
        # Remove BOM if present
        if xml_content.startswith('\ufeff'):
            xml_content = xml_content[1:]

        if not xml_content.strip():
            raise MalformedXmlError("Document is empty")

        try:
            root = etree.fromstring(xml_content.encode('utf-8'), self._parser)
        except etree.XMLSyntaxError as e:
            logger.debug("XML parsing error: %s", e)
            line, column = e.position if e.position else (0, 0)
            raise MalformedXmlError(e.msg or str(e), line or 0, column or 0) from e

        return self._build_tree(root)

    def _build_tree(self, root) -> TreeNode:
        """Convert an lxml element tree to TreeNodes without recursing.

        Each stack frame holds an element, the namespace map in scope above
        it, an iterator over its children, and the children and text
        collected so far.
        """
        stack = [(root, {}, iter(root), [], [root.text or ''])]
        while True:
            element, parent_nsmap, child_iter, children, text_parts = stack[-1]
            child = next(child_iter, None)
            if child is not None:
                text_parts.append(child.tail or '')
                # Entity references left unresolved are not elements
                if isinstance(child.tag, str):
                    stack.append((child, element.nsmap, iter(child), [], [child.text or '']))
                continue

            stack.pop()
            node = self._make_node(element, parent_nsmap, children, text_parts)
            if not stack:
                return node
            stack[-1][3].append(node)

    def _make_node(self, element, parent_nsmap: Dict[Optional[str], str],
                   children: List[TreeNode], text_parts: List[str]) -> TreeNode:
        attributes = {}

        # Namespace declarations introduced on this element
        for prefix, uri in element.nsmap.items():
            if parent_nsmap.get(prefix) != uri:
                attributes['xmlns' if prefix is None else f'xmlns:{prefix}'] = uri

        for index, (key, value) in enumerate(element.attrib.items(), 1):
            attributes[self._qualified_name(element, key, index)] = value

        local_name = etree.QName(element).localname
        tag_name = f"{element.prefix}:{local_name}" if element.prefix else local_name

        return TreeNode(
            tag_name=tag_name,
            attributes=attributes,
            children=tuple(children),
            text_content=''.join(text_parts).strip(),
        )

    def _qualified_name(self, element, name: str, index: int) -> str:
        """Turn lxml's '{uri}local' attribute key back into 'prefix:local'"""
        if not name.startswith('{'):
            return name
        uri, local = name[1:].split('}', 1)
        if uri == _XML_NAMESPACE:
            return f"xml:{local}"
        prefixes = [p for p, ns in element.nsmap.items() if p is not None and ns == uri]
        if len(prefixes) == 1:
            return f"{prefixes[0]}:{local}"
        if prefixes:
            # Several prefixes share the URI; XPath name() reports the one written
            return str(element.xpath(f'name(@*[{index}])'))
        return local

    def serialize(self, node: TreeNode, depth: int = 0, escape_values: bool = True) -> str:
        """Serialize a TreeNode to indented XML text.

        Leaf nodes without text become self-closing tags, leaf nodes with
        text stay on one line, and nodes with children are written as a
        block with the text (if any) on its own line before the children.
        With escape_values=False attribute values and text are written
        verbatim, so a value containing a quote will not round-trip.
        """
        parts = []
        # (node, depth, closing tag?, newline after?)
        stack = [(node, depth, False, False)]

        while stack:
            current, level, closing, newline = stack.pop()
            indentation = INDENT * level

            if closing:
                parts.append(f"{indentation}</{current.tag_name}>")
            else:
                parts.append(f"{indentation}<{current.tag_name}")
                for name, value in current.attributes.items():
                    if escape_values:
                        value = escape(value, _ATTRIBUTE_ENTITIES)
                    parts.append(f' {name}="{value}"')

                text = escape(current.text_content) if escape_values else current.text_content
                if not current.children and not text:
                    parts.append(' />')
                elif not current.children:
                    parts.append(f">{text}</{current.tag_name}>")
                else:
                    parts.append('>\n')
                    if text:
                        parts.append(f"{INDENT * (level + 1)}{text}\n")
                    stack.append((current, level, True, newline))
                    for child in reversed(current.children):
                        stack.append((child, level + 1, False, True))
                    continue

            if newline:
                parts.append('\n')

        return ''.join(parts)

    def count_nodes(self, node: TreeNode) -> int:
        """Count elements in the subtree, node included"""
        return sum(1 for _ in iter_nodes(node))

    def get_statistics(self, xml_content: str) -> XmlStatistics:
        """Get XML statistics"""
        root = self.parse(xml_content)

        attribute_count = 0
        text_node_count = 0
        for node in iter_nodes(root):
            attribute_count += len(node.attributes)
            if node.text_content:
                text_node_count += 1

        # Comments are dropped from the tree, so count them in the source
        comment_count = len(_COMMENT_PATTERN.findall(xml_content))

        return XmlStatistics(
            element_count=self.count_nodes(root),
            attribute_count=attribute_count,
            text_node_count=text_node_count,
            comment_count=comment_count,
            total_size=len(xml_content.encode('utf-8')),
        )
