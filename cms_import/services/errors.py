"""
Import error taxonomy.

Setup errors stop the run. Most are found before processing starts; a
corrupt compressed stream can surface mid-pass. Everything raised per line
or per story is caught by the runner and counted.
"""


class ImportSetupError(Exception):
    """Unrecoverable input or environment problem. The CLI exits 1."""


class InputUnavailableError(ImportSetupError):
    """Input file is missing or cannot be opened."""


class FallbackAuthorError(ImportSetupError):
    """No user exists to own imported articles."""


class InputCorruptError(ImportSetupError):
    """Input file opens but its (compressed) stream cannot be read to the end."""


class StoryDecodeError(Exception):
    """A line is not a valid story record."""

    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        self.message = message
        super().__init__(f"line {line_number}: {message}")
