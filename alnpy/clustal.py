"""
alnpy.clustal - reading alignments in CLUSTAL format

Covers the family of block-interleaved outputs written by CLUSTAL and the
tools that mimic it (PROBCONS, MUSCLE, MSAPROBS, Kalign)::

    CLUSTAL W (1.81) multiple sequence alignment


    seq1        MKVLAAGIVG-LLLAS
    seq2        MKVLSAGIVGALLLAT
                ****:***** ****:

    seq1        SAQAEKPLTE
    seq2        SAQAEKPLSE
                ******** *

"""

# core
import io
import logging
import os
import re

# local
from alnpy import error as err
from alnpy.align import Alignment

LOG = logging.getLogger(__name__)

# tried in order, case-sensitive prefix match against the first line
KNOWN_HEADERS = ('CLUSTAL', 'PROBCONS', 'MUSCLE', 'MSAPROBS', 'Kalign')

RE_VERSION = re.compile(r'(\d+(?:\.\d+)+)')

DEFAULT_CONSENSUS_KEY = 'cons'


class ParserState(object):
    """States of the CLUSTAL block parser."""

    HEADER = 'header'
    BETWEEN_BLOCKS = 'between_blocks'
    IN_BLOCK = 'in_block'


class ColumnWindow(object):
    """Character offsets ``[start, end)`` of the residues within the lines of a block."""

    def __init__(self, start: int, end: int):
        self.start = int(start)
        self.end = int(end)

    @property
    def width(self):
        """Returns the number of columns covered by the window."""
        return self.end - self.start

    def slice(self, line: str) -> str:
        """Returns the part of ``line`` under this window (space padded if the line is short)."""
        return line[self.start:self.end].ljust(self.width)

    def __repr__(self):
        return "ColumnWindow:{}-{}".format(self.start, self.end)


class Block(object):
    """Keeps track of the sequence lines seen in the block currently being read."""

    def __init__(self, number: int, start_column: int):
        self.number = number
        self.start_column = start_column
        self.width = None
        self.record_ids = []

    def __repr__(self):
        return "Block:{} (columns:{}+{}, records:{})".format(
            self.number, self.start_column, self.width, len(self.record_ids))


class ClustalParser(object):
    """
    Builds an :class:`Alignment` from the lines of a CLUSTAL formatted alignment.

    Lines are consumed one at a time: the header is checked first, then each
    block of ``<id> <residues>`` lines extends the records of the alignment
    and the optional consensus line that follows a block is added to the
    per-column annotation ``consensus_key``.

    A parse either returns a complete alignment or raises: the alignment is
    private to :meth:`parse` until it has been fully read and validated.

    Args:
        strict (bool): validate the complete alignment before returning it
        consensus_key (str): name of the per-column annotation for consensus lines
        allow_residue_counts (bool): accept a trailing residue count on sequence lines
        known_headers (tuple): program names accepted at the start of the header
    """

    def __init__(self, *, strict=True, consensus_key=DEFAULT_CONSENSUS_KEY,
                 allow_residue_counts=False, known_headers=KNOWN_HEADERS):
        self.strict = strict
        self.consensus_key = consensus_key
        self.allow_residue_counts = allow_residue_counts
        self.known_headers = tuple(known_headers)

    def parse(self, lines, *, source=None):
        """
        Parses an iterable of lines (eg an open file) into a new alignment.

        Args:
            lines: iterable of text lines (with or without line terminators)
            source (str): name of the input used in error messages

        Returns:
            aln (Alignment): the parsed alignment

        Raises:
            UnrecognizedHeaderError: the first line is not a known header
            MalformedLineError: a line does not have the expected fields
            LengthMismatchError: a block does not fit the existing columns
            DuplicateSequenceError: an id appears twice in the same block
        """

        source = source or '<lines>'
        aln = Alignment()
        state = ParserState.HEADER
        block = None
        window = None
        block_count = 0

        line_count = 0
        for line in lines:
            line_count += 1
            line = line.rstrip('\r\n')
            where = '{}:{}'.format(source, line_count)

            if state == ParserState.HEADER:
                self._read_header(aln, line)
                state = ParserState.BETWEEN_BLOCKS

            elif not line.strip():
                if state == ParserState.IN_BLOCK:
                    self._close_block(aln, block, where)
                    block, window = None, None
                    state = ParserState.BETWEEN_BLOCKS

            elif line[0].isspace():
                if state != ParserState.IN_BLOCK:
                    raise err.MalformedLineError(
                        'found a consensus line that does not follow a block of sequences ({}): "{}"'.format(
                            where, line))
                self._read_consensus(aln, block, window, line)
                self._close_block(aln, block, where)
                block, window = None, None
                state = ParserState.BETWEEN_BLOCKS

            else:
                if state == ParserState.BETWEEN_BLOCKS:
                    block_count += 1
                    block = Block(block_count, aln.column_len())
                    state = ParserState.IN_BLOCK
                window = self._read_sequence(aln, block, line, where)

        if state == ParserState.HEADER:
            raise err.UnrecognizedHeaderError(header='', known_headers=self.known_headers)

        if state == ParserState.IN_BLOCK:
            self._close_block(aln, block, '{}:{}'.format(source, line_count))

        if self.consensus_key in aln.column_annotations:
            aln.pad_column_annotation(self.consensus_key, aln.column_len())

        if self.strict:
            aln.validate()

        LOG.debug("parsed %s: %s records, %s columns, %s blocks",
                  source, len(aln), aln.column_len(), block_count)
        return aln

    def _read_header(self, aln, line):
        program = next((h for h in self.known_headers if line.startswith(h)), None)
        if not program:
            raise err.UnrecognizedHeaderError(header=line, known_headers=self.known_headers)
        aln.set_whole_annotation('program', program)

        match = RE_VERSION.search(line)
        if match:
            aln.set_whole_annotation('version', match.group(1))

        LOG.debug("header: program=%s version=%s", program, aln.get_annotation('version'))

    def _read_sequence(self, aln, block, line, where):
        """Adds the residues of a sequence line and returns their column window."""

        fields = line.split()
        if self.allow_residue_counts and len(fields) == 3 and fields[2].isdigit():
            fields = fields[:2]

        if len(fields) != 2:
            raise err.MalformedLineError(
                'expected a sequence id followed by residues, found {} field(s) ({}): "{}"'.format(
                    len(fields), where, line))

        seq_id, fragment = fields

        # offsets in the raw line, padding after the id varies between files
        start = line.find(fragment, len(seq_id))
        window = ColumnWindow(start, start + len(fragment))

        if seq_id in block.record_ids:
            raise err.DuplicateSequenceError(
                "sequence '{}' appears more than once in block {} ({}): \"{}\"".format(
                    seq_id, block.number, where, line))

        if block.width is None:
            block.width = window.width
        elif window.width != block.width:
            raise err.LengthMismatchError((
                "sequence '{}' has {} residues in block {}, "
                "but the block started with {} ({}): \"{}\"").format(
                    seq_id, window.width, block.number, block.width, where, line))

        if block.number > 1 and not aln.contains_id(seq_id):
            raise err.LengthMismatchError((
                "sequence '{}' first appears in block {}, after the alignment "
                "already has {} columns ({}): \"{}\"").format(
                    seq_id, block.number, block.start_column, where, line))

        aln.add_or_extend(seq_id, fragment)
        block.record_ids.append(seq_id)
        return window

    def _read_consensus(self, aln, block, window, line):
        # earlier blocks may not have had a consensus line
        aln.pad_column_annotation(self.consensus_key, block.start_column)
        aln.append_column_annotation(self.consensus_key, window.slice(line))

    def _close_block(self, aln, block, where):
        seen_ids = set(block.record_ids)
        missing_ids = [r.id for r in aln.records if r.id not in seen_ids]
        if missing_ids:
            raise err.LengthMismatchError(
                "block {} (ending {}) has no residues for sequence(s): {}".format(
                    block.number, where, ", ".join(missing_ids)))

        LOG.debug("block %s: %s records, columns %s-%s",
                  block.number, len(block.record_ids),
                  block.start_column + 1, block.start_column + block.width)


def _get_io_from_file_or_string(file_or_string, known_headers=KNOWN_HEADERS):
    """Returns (io, name, should_close) for a filename, alignment text or open io."""

    if isinstance(file_or_string, str):
        is_text = '\n' in file_or_string or (
            file_or_string.startswith(tuple(known_headers))
            and not os.path.exists(file_or_string))
        if is_text:
            return io.StringIO(file_or_string), '<string>', True
        return open(file_or_string), file_or_string, True

    if isinstance(file_or_string, os.PathLike):
        return open(file_or_string), os.fspath(file_or_string), True

    filename = getattr(file_or_string, 'name', repr(file_or_string))
    return file_or_string, str(filename), False


def read_clustal(clustal_io, **kwargs):
    """
    Reads an alignment from a CLUSTAL file / string / io.

    Keyword arguments are passed to :class:`ClustalParser`.
    """

    known_headers = kwargs.get('known_headers', KNOWN_HEADERS)
    clustal_io, clustal_filename, should_close = _get_io_from_file_or_string(
        clustal_io, known_headers)

    parser = ClustalParser(**kwargs)
    try:
        aln = parser.parse(clustal_io, source=clustal_filename)
    finally:
        if should_close:
            clustal_io.close()

    return aln
