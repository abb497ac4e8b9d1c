"""
Text search over rendered panel content
"""

import re
from dataclasses import dataclass
from typing import List

from errors import InvalidSearchPattern
from models import FormatterSettings, SearchMatch


@dataclass(frozen=True)
class SearchOptions:
    """How a query is matched against content"""
    case_sensitive: bool = False
    whole_word: bool = False
    use_regex: bool = False

    @classmethod
    def from_settings(cls, settings: FormatterSettings) -> 'SearchOptions':
        return cls(
            case_sensitive=settings.search_case_sensitive,
            whole_word=settings.search_whole_word,
            use_regex=settings.search_use_regex,
        )


def _compile(query: str, options: SearchOptions):
    """Build a pattern for the regex and whole-word paths, None for plain text"""
    if not (options.use_regex or options.whole_word):
        return None
    flags = 0 if options.case_sensitive else re.IGNORECASE
    pattern_text = query if options.use_regex else re.escape(query)
    if options.whole_word:
        pattern_text = fr"\b(?:{pattern_text})\b"
    try:
        return re.compile(pattern_text, flags)
    except re.error as e:
        raise InvalidSearchPattern(f"Invalid regex: {e}") from e


def find_matches(content: str, query: str, options: SearchOptions = SearchOptions()) -> List[SearchMatch]:
    """Find non-overlapping matches of query, scanning lines left to right.

    Matches never span line breaks. Zero-length regex matches are ignored.
    """
    if not query:
        return []

    pattern = _compile(query, options)
    needle = query if options.case_sensitive else query.casefold()
    results = []

    for line_number, line in enumerate(content.split('\n'), 1):
        if pattern is not None:
            for m in pattern.finditer(line):
                if m.end() > m.start():
                    results.append(SearchMatch(line_number, m.start(), m.end()))
            continue

        src = line if options.case_sensitive else line.casefold()
        # casefold can change length (e.g. 'ß' -> 'ss'); fall back to regex then
        if len(src) != len(line) or len(needle) != len(query):
            flags = 0 if options.case_sensitive else re.IGNORECASE
            for m in re.finditer(re.escape(query), line, flags):
                results.append(SearchMatch(line_number, m.start(), m.end()))
            continue

        start = 0
        while True:
            pos = src.find(needle, start)
            if pos == -1:
                break
            results.append(SearchMatch(line_number, pos, pos + len(needle)))
            start = pos + len(needle)

    return results


def count_matches(content: str, query: str, options: SearchOptions = SearchOptions()) -> int:
    return len(find_matches(content, query, options))
