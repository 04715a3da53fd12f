"""
alnpy.align - records and multiple sequence alignments
"""

# core
import json
import logging
import re

# deps
import jsonpickle

# local
from alnpy import error as err

LOG = logging.getLogger(__name__)


class Record(object):
    """Class to represent a single named sequence within an alignment."""

    re_gap_chars = r'[.\-]'

    def __init__(self, _id: str, seq: str = '', *, annotations=None):
        if not _id:
            raise err.ParamError('record id seems to be empty')
        self._id = _id
        self._seq = seq
        self.annotations = {}
        if annotations:
            for key, val in annotations.items():
                self.annotations[key] = val

    @property
    def id(self):
        """Returns the id for this Record"""
        return self._id

    @property
    def seq(self):
        """Return the residues as a string (including gaps)."""
        return self._seq

    @property
    def seq_no_gaps(self):
        """Return the residues as a string (after removing all gaps)."""
        return re.sub(self.re_gap_chars, '', self._seq)

    def extend(self, fragment: str):
        """Append a fragment of residues to the end of this sequence."""
        self._seq += fragment

    def length(self):
        """Return the length of the sequence (including gaps)."""
        return len(self._seq)

    def get_res_at_offset(self, offset):
        """Return the residue character at the given offset (includes gaps)."""
        try:
            res = self._seq[offset]
        except IndexError:
            raise err.SeqIOError(
                "failed to get residue at offset {} from sequence '{}' with length {}".format(
                    offset, self.id, self.length()))
        return res

    def copy(self):
        """Provide a deep copy of this record."""
        return Record(self._id, self._seq, annotations=self.annotations)

    @staticmethod
    def is_gap(res_char):
        """Test whether a character is considered a gap."""
        return res_char in ['-', '.']

    def __len__(self):
        return self.length()

    def __str__(self):
        """Represents this Record as a string."""
        return '{:<30} {}'.format(self.id, self.seq)

    def __repr__(self):
        return "Record({}, length:{})".format(self.id, self.length())


class Alignment(object):
    """
    Object representing a multiple sequence alignment.

    An alignment holds an ordered list of :class:`Record` objects (all with
    the same number of columns), a dict of annotations describing the whole
    alignment (eg ``program``, ``version``) and a dict of per-column
    annotations, where each value holds one character per alignment column
    (eg the consensus row of a CLUSTAL file).
    """

    SUMMARY_MAX_RECORDS = 10
    SUMMARY_MAX_RESIDUES = 30

    def __init__(self, records=None, *, annotations=None, column_annotations=None):
        self.records = []
        self.annotations = dict(annotations) if annotations else {}
        self.column_annotations = dict(column_annotations) if column_annotations else {}
        self._records_by_id = {}
        for record in records or []:
            self.add_record(record)

    @classmethod
    def from_clustal(cls, clustal_io, **kwargs):
        """Initialises an alignment from a CLUSTAL file / string / io"""
        from alnpy.clustal import read_clustal
        return read_clustal(clustal_io, **kwargs)

    def _reindex_record_ids(self):
        self._records_by_id = {}
        for record in self.records:
            self._records_by_id[record.id] = record

    @property
    def record_ids(self):
        """Returns the ids of the records in alignment order."""
        return [record.id for record in self.records]

    @property
    def count_records(self):
        """Returns the number of records in the alignment."""
        return len(self.records)

    def column_len(self):
        """Returns the number of columns (ie the length of the first record)."""
        return self.records[0].length() if self.records else 0

    def is_empty(self):
        """Returns whether the alignment contains any records."""
        return not self.records

    def contains_id(self, _id):
        """Returns whether a record with the given id is in the alignment."""
        return _id in self._records_by_id

    def find_record_by_id(self, _id):
        """Returns the Record corresponding to the provided id."""
        try:
            return self._records_by_id[_id]
        except KeyError:
            raise err.NoMatchesError(
                'failed to find record with id {} in alignment'.format(_id))

    def get_record_at_offset(self, offset):
        """Returns the Record at the given offset (zero-based)."""
        return self.records[offset]

    def add_record(self, record: Record):
        """Add a complete record to this alignment."""

        if record.id in self._records_by_id:
            raise err.DuplicateSequenceError((
                "cannot add a record with id {}, "
                "since this alignment already has a record with that id").format(record.id))

        if self.records and record.length() != self.column_len():
            raise err.LengthMismatchError((
                "cannot add a record (id:{}) "
                "with {} positions to an alignment with {} positions").format(
                    record.id, record.length(), self.column_len()))

        self.records.append(record)
        self._records_by_id[record.id] = record
        return record

    def add_or_extend(self, _id, fragment):
        """
        Appends ``fragment`` to the record with the given id, or adds a new
        record (at the end of the alignment) if there is no such record yet.

        Every other record must either still be waiting for this block's
        fragment (same length as this record before the call) or have already
        received it (same length as this record after the call). The
        alignment is left untouched when that is not the case.

        Raises:
            LengthMismatchError: fragment would make the record lengths inconsistent
        """
        record = self._records_by_id.get(_id)
        current_length = record.length() if record is not None else 0
        new_length = current_length + len(fragment)

        for other in self.records:
            if other is record:
                continue
            if other.length() not in (current_length, new_length):
                raise err.LengthMismatchError((
                    "cannot add {} residues to record '{}' ({} -> {} positions): "
                    "record '{}' has {} positions").format(
                        len(fragment), _id, current_length, new_length,
                        other.id, other.length()))

        if record is not None:
            record.extend(fragment)
        else:
            record = Record(_id, fragment)
            self.records.append(record)
            self._records_by_id[_id] = record

        return record

    def get_annotation(self, name):
        """Returns the whole-alignment annotation with the given name (or None)."""
        return self.annotations.get(name)

    def set_whole_annotation(self, name, value):
        """Sets an annotation for the whole alignment, returning the previous value (or None)."""
        previous = self.annotations.get(name)
        self.annotations[name] = value
        return previous

    def get_column_annotation(self, name):
        """Returns the per-column annotation with the given name (or None)."""
        return self.column_annotations.get(name)

    def append_column_annotation(self, name, fragment):
        """Appends ``fragment`` to the named per-column annotation."""
        self.column_annotations[name] = self.column_annotations.get(name, '') + fragment
        return self.column_annotations[name]

    def pad_column_annotation(self, name, length, fill=' '):
        """Pads the named per-column annotation with ``fill`` up to ``length`` columns."""
        value = self.column_annotations.get(name, '')
        if len(value) < length:
            value += fill * (length - len(value))
        self.column_annotations[name] = value
        return value

    def validate(self):
        """
        Checks that all records have the same length and distinct ids, and
        that every per-column annotation covers each column.

        Raises:
            DuplicateSequenceError: two records share an id
            LengthMismatchError: records or column annotations differ in length
        """
        seen_ids = set()
        for record in self.records:
            if record.id in seen_ids:
                raise err.DuplicateSequenceError(
                    "found more than one record with id '{}' in alignment".format(record.id))
            seen_ids.add(record.id)

        col_len = self.column_len()
        for record in self.records:
            if record.length() != col_len:
                raise err.LengthMismatchError(
                    "record '{}' has {} positions, expected {}".format(
                        record.id, record.length(), col_len))

        for name, value in self.column_annotations.items():
            if len(value) != col_len:
                raise err.LengthMismatchError(
                    "column annotation '{}' has {} positions, expected {}".format(
                        name, len(value), col_len))

    def clear(self):
        """Removes all records and annotations."""
        self.records = []
        self._records_by_id = {}
        self.annotations.clear()
        self.column_annotations.clear()

    def copy(self):
        """Return a deepcopy of this object."""
        return Alignment([r.copy() for r in self.records],
                         annotations=self.annotations,
                         column_annotations=self.column_annotations)

    def as_json(self, *, pp=False):
        """Returns the Alignment as JSON formatted string."""

        data = jsonpickle.encode(self)
        if pp:
            data = json.dumps(json.loads(data), indent=2, sort_keys=True)

        LOG.debug("Serialized Alignment as JSON string (length:%s)", len(data))
        return data

    def __getstate__(self):
        state = self.__dict__.copy()
        del state['_records_by_id']
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        self._reindex_record_ids()

    def __len__(self):
        return len(self.records)

    def __str__(self):
        if self.is_empty():
            return 'No sequence in alignment'

        num_rows = len(self)
        num_cols = self.column_len()
        lines = ['Alignment with {} {} and {} {}'.format(
            num_rows, 'row' if num_rows == 1 else 'rows',
            num_cols, 'column' if num_cols == 1 else 'columns')]

        for record in self.records[:self.SUMMARY_MAX_RECORDS]:
            seq = record.seq[:self.SUMMARY_MAX_RESIDUES]
            if record.length() > self.SUMMARY_MAX_RESIDUES:
                seq += '...'
            lines.append('{}\t{}'.format(record.id, seq))

        if num_rows > self.SUMMARY_MAX_RECORDS:
            lines.append('...')

        return "".join([l + "\n" for l in lines])
