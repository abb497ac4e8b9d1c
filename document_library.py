import logging
import os
import uuid
from typing import List, Optional

from errors import FormatterError
from models import WorkspaceFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
FALLBACK_ENCODINGS = ('utf-8-sig', 'cp1251')


def read_text_file(file_path: str) -> str:
    """Read a text file in chunks, trying each fallback encoding in turn"""
    for encoding in FALLBACK_ENCODINGS:
        content_parts = []
        try:
            with open(file_path, 'r', encoding=encoding) as file:
                while True:
                    chunk = file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    content_parts.append(chunk)
        except UnicodeDecodeError:
            logger.debug("%s is not valid %s", file_path, encoding)
            continue
        except OSError as e:
            raise FormatterError(f"Failed to read {file_path}: {e}") from e
        return ''.join(content_parts)
    raise FormatterError(f"Failed to read {file_path} with any encoding")


class DocumentLibrary:
    """Files and pasted snippets available to load into panels"""

    def __init__(self):
        self.files: List[WorkspaceFile] = []
        # Next number used to name a pasted snippet
        self.snippet_count = 1

    def add_file(self, name: str, raw: str) -> WorkspaceFile:
        document = WorkspaceFile(id=str(uuid.uuid4()), name=name, raw=raw)
        self.files.append(document)
        logger.debug("Added document %s (%s)", document.name, document.id)
        return document

    def load_file(self, file_path: str) -> WorkspaceFile:
        """Read a file from disk and add it under its base name"""
        raw = read_text_file(file_path)
        logger.info("Loaded %s (%d characters)", file_path, len(raw))
        return self.add_file(os.path.basename(file_path), raw)

    def add_snippet(self, raw: str) -> WorkspaceFile:
        """Add pasted text under the next 'Snippet N' name"""
        document = self.add_file(f"Snippet {self.snippet_count}", raw)
        self.snippet_count += 1
        return document

    def remove_file(self, file_id: str):
        self.files = [f for f in self.files if f.id != file_id]

    def get_file(self, file_id: str) -> Optional[WorkspaceFile]:
        for f in self.files:
            if f.id == file_id:
                return f
        return None
