"""
Exceptions raised by the formatter core
"""


class FormatterError(Exception):
    """Base class for formatter errors"""


class ParseError(FormatterError):
    """Text is not valid JSON"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self):
        if self.line > 0 and self.column > 0:
            return f"Line {self.line}, Column {self.column}: {self.message}"
        return self.message


class MalformedXmlError(FormatterError):
    """Text is not well-formed XML"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self):
        if self.line > 0 and self.column > 0:
            return f"Line {self.line}, Column {self.column}: {self.message}"
        elif self.line > 0:
            return f"Line {self.line}: {self.message}"
        return self.message


class InvalidSearchPattern(FormatterError):
    """Search query is not a valid regular expression"""
