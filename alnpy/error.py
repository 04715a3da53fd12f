"""
alnpy exception classes
"""

import logging

LOG = logging.getLogger(__name__)


class GeneralError(Exception):
    """General Exception class within the alnpy package."""


class ParamError(GeneralError):
    """Incorrect parameters."""


class NoMatchesError(GeneralError):
    """No matches."""


class SeqIOError(GeneralError):
    """General Exception class for reading and building alignments"""


class ParseError(SeqIOError):
    """Failed to parse information."""


class UnrecognizedHeaderError(ParseError):
    """The first line does not look like the header of a known alignment program."""

    def __init__(self, *, header, known_headers):
        message = ("The header is not a recognised CLUSTAL header "
                   "(expected the first line to start with one of: {}): '{}'").format(
                       ", ".join(known_headers), header)
        self.header = header
        self.known_headers = tuple(known_headers)
        super().__init__(message)


class MalformedLineError(ParseError):
    """A line in the alignment does not have the expected fields."""


class LengthMismatchError(SeqIOError):
    """A sequence fragment does not fit the number of columns in the alignment."""


class DuplicateSequenceError(SeqIOError):
    """More than one sequence in an alignment has the same id"""
