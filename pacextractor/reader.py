# Reads Spreadtrum .pac firmware containers, as used by SPD Flash Tool,
# and extracts the partition images they carry.
#
# Based on pacExtractor by HemanthJabalpuri.
#
# This file has been put into the public domain.
# You can do whatever you want with this file.

import contextlib
import enum
import logging
import os

from .crc16 import crc16
from .errors import (
    PacError, FormatTooSmall, TruncatedHeader, TruncatedDescriptor,
    SizeMismatch, UnsupportedVersion, UnknownDescriptorFormat,
    ChecksumMismatch, ExtractionIOError, UnsafeFileName, PayloadOutOfBounds)
from .formats import FORMATS

logger = logging.getLogger(__name__)

EXTRACT_CHUNK_SIZE = 4096
CRC_CHUNK_SIZE = 64 * 1024

UNSAFE_NAME_CHARS = ('/', '\\', '\x00', ':')


class State(enum.Enum):
    OPENED = 'opened'
    HEADER_READ = 'header-read'
    VALIDATED = 'validated'
    DESCRIPTORS_READ = 'descriptors-read'
    EXTRACTING = 'extracting'
    DONE = 'done'
    FAILED = 'failed'


def safe_file_name(name, index=None, partition=None):
    """Returns `name` if it is a plain file name, raises UnsafeFileName otherwise."""
    if name in ('', '.', '..') or any(c in name for c in UNSAFE_NAME_CHARS):
        raise UnsafeFileName(f'refusing to write partition to file name {name!r}',
                             index=index, partition=partition)
    return name


class PacContainer(object):
    """
    A PAC file opened for reading.

    The header is read when the container is created. Validation, the
    partition table and extraction follow in that order, and each step runs
    the ones before it when needed. Any PacError leaves the container in
    State.FAILED.
    """

    def __init__(self, file, formats=FORMATS, name=None, owns_file=False):
        if not formats:
            raise ValueError('at least one PAC format is required')
        self.file = file
        self.name = name or getattr(file, 'name', '<pac>')
        self.formats = tuple(formats)
        self.format = None
        self.header = None
        self.partitions = None
        self._raw_header = b''
        self._owns_file = owns_file
        self.state = State.OPENED

        self.file.seek(0, os.SEEK_END)
        self.length = self.file.tell()
        self.file.seek(0)

        with self._failing():
            self._read_header()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        if self._owns_file:
            self.file.close()

    @contextlib.contextmanager
    def _failing(self):
        if self.state is State.FAILED:
            raise PacError(f'{self.name}: container is unusable after an earlier error',
                           stage=State.FAILED.value)
        try:
            yield
        except PacError as e:
            if e.stage is None:
                e.stage = self.state.value
            logger.debug('%s: failed while %s: %s', self.name, e.stage, e.message)
            self.state = State.FAILED
            raise

    def _read_header(self):
        min_size = min(f.header_size for f in self.formats)
        if self.length < min_size:
            raise FormatTooSmall(
                f'{self.name} is not a PAC firmware ({self.length} bytes, '
                f'header alone is {min_size} bytes)')

        self.file.seek(0)
        data = self.file.read(max(f.header_size for f in self.formats))
        self.format = next((f for f in self.formats if f.accepts(data)), None)

        # Unknown versions still get parsed so the size can be checked first
        layout = self.format or self.formats[0]
        if len(data) < layout.header_size:
            raise TruncatedHeader(
                f'Error while parsing PAC header: got {len(data)} of '
                f'{layout.header_size} bytes')
        self._raw_header = data[:layout.header_size]
        self.header = layout.parse_header(self._raw_header)
        self.state = State.HEADER_READ
        logger.debug('%s: read %d byte header, version %r, %d partitions',
                     self.name, layout.header_size, self.header.version,
                     self.header.partition_count)

    def validate(self):
        """Checks the declared size and version; returns the matched format."""
        if self.state not in (State.OPENED, State.HEADER_READ):
            with self._failing():
                return self.format

        with self._failing():
            if self.header.size != self.length:
                raise SizeMismatch(
                    f"Bin packet's size is not correct: header says "
                    f'{self.header.size} bytes, file is {self.length} bytes')
            if self.format is None:
                raise UnsupportedVersion(
                    f'Unsupported PAC version {self.header.version!r}')
            self.state = State.VALIDATED
        logger.debug('%s: valid %s container', self.name, self.format.name)
        return self.format

    def verify_checksums(self, progress=None, chunk_size=CRC_CHUNK_SIZE):
        """
        Verifies CRC1 (header, only when the magic is present) and CRC2
        (everything after the header). Calls progress('crc2', percent) while
        going through the file.
        """
        if chunk_size <= 0:
            raise ValueError('chunk_size must be positive')
        fmt = self.validate()
        header = self.header

        with self._failing():
            if header.magic == fmt.magic:
                logger.info('Checking CRC Part 1')
                crc1 = crc16(self._raw_header[:fmt.header_size - 4])
                logger.debug('Computed CRC1 = %d, CRC1 in PAC = %d', crc1, header.crc1)
                if crc1 != header.crc1:
                    raise ChecksumMismatch('CRC Check failed for CRC1',
                                           expected=header.crc1, computed=crc1)

            logger.info('Checking CRC Part 2')
            self.file.seek(fmt.header_size)
            total = remaining = header.size - fmt.header_size
            crc2 = 0
            while remaining > 0:
                data = self.file.read(min(chunk_size, remaining))
                if not data:
                    raise ChecksumMismatch(
                        f'CRC Check failed for CRC2: data ends {remaining} bytes early',
                        expected=header.crc2)
                crc2 = crc16(data, crc2)
                remaining -= len(data)
                if progress is not None:
                    progress('crc2', 100 - 100 * remaining // total)
            logger.debug('Computed CRC2 = %d, CRC2 in PAC = %d', crc2, header.crc2)
            if crc2 != header.crc2:
                raise ChecksumMismatch('CRC Check failed for CRC2',
                                       expected=header.crc2, computed=crc2)

    def list_partitions(self):
        """Reads the partition table once and returns its records in order."""
        if self.partitions is not None:
            return list(self.partitions)
        fmt = self.validate()
        header = self.header

        with self._failing():
            size = fmt.partition_size
            table_end = header.partitions_offset + header.partition_count * size
            if table_end > self.length:
                raise TruncatedDescriptor(
                    f'partition table of {header.partition_count} x {size} bytes at '
                    f'{header.partitions_offset} runs past the end of the file '
                    f'({self.length} bytes)')

            self.file.seek(header.partitions_offset)
            partitions = []
            for i in range(header.partition_count):
                data = self.file.read(size)
                if len(data) != size:
                    raise TruncatedDescriptor(
                        f'Partition header error: got {len(data)} of {size} bytes',
                        index=i)
                partition = fmt.parse_partition(data, i)
                if partition.length != size:
                    raise UnknownDescriptorFormat(
                        f'Unknown Partition Header format found: record is '
                        f'{partition.length} bytes, expected {size}',
                        index=i, partition=partition.partition_name)
                logger.debug('%s: partition %d %s -> %s, %d bytes @ 0x%x', self.name, i,
                             partition.partition_name, partition.file_name,
                             partition.size, partition.offset)
                partitions.append(partition)

            self.partitions = partitions
            self.state = State.DESCRIPTORS_READ
        return list(partitions)

    def extract_all(self, outdir, progress=None, names=None,
                    chunk_size=EXTRACT_CHUNK_SIZE):
        """
        Writes every non-empty partition to `outdir`, named after its file
        name. `names` limits extraction to those partition names. Returns the
        paths written, in table order.
        """
        if chunk_size <= 0:
            raise ValueError('chunk_size must be positive')
        partitions = self.list_partitions()

        with self._failing():
            self.state = State.EXTRACTING
            _make_outdir(outdir)
            if names is not None:
                known = {p.partition_name for p in partitions}
                for name in names:
                    if name not in known:
                        logger.warning('%s: no partition named %r', self.name, name)
            written = []
            for partition in partitions:
                if partition.size == 0:
                    continue
                if names is not None and partition.partition_name not in names:
                    continue
                written.append(self._extract(partition, outdir, progress, chunk_size))
            self.state = State.DONE
        logger.info('Done, %d files extracted to %s', len(written), outdir)
        return written

    def extract_partition(self, partition, outdir, progress=None,
                          chunk_size=EXTRACT_CHUNK_SIZE):
        """Writes a single partition to `outdir`; returns the path, or None if it is empty."""
        if chunk_size <= 0:
            raise ValueError('chunk_size must be positive')
        self.list_partitions()
        if partition.size == 0:
            return None

        with self._failing():
            previous = self.state
            self.state = State.EXTRACTING
            _make_outdir(outdir)
            path = self._extract(partition, outdir, progress, chunk_size)
            self.state = previous
        return path

    def _extract(self, partition, outdir, progress, chunk_size):
        context = dict(index=partition.index, partition=partition.partition_name)
        file_name = safe_file_name(partition.file_name, **context)
        if partition.offset + partition.size > self.length:
            raise PayloadOutOfBounds(
                f'{file_name}: {partition.size} bytes at {partition.offset} '
                f'run past the end of the file ({self.length} bytes)', **context)

        path = os.path.join(outdir, file_name)
        logger.info('Extracting %s to %s', partition.partition_name, path)
        try:
            if os.path.lexists(path):
                os.remove(path)
            with open(path, 'wb') as out_f:
                self.file.seek(partition.offset)
                remaining = partition.size
                while remaining > 0:
                    size = min(chunk_size, remaining)
                    data = self.file.read(size)
                    if len(data) != size:
                        raise ExtractionIOError(
                            f'Partition image extraction error: read {len(data)} '
                            f'of {size} bytes', **context)
                    count = out_f.write(data)
                    if count != size:
                        raise ExtractionIOError(
                            f'Partition image extraction error: wrote {count} '
                            f'of {size} bytes', **context)
                    remaining -= size
                    if progress is not None:
                        progress(partition.partition_name,
                                 100 - 100 * remaining // partition.size)
        except OSError as e:
            raise ExtractionIOError(f'cannot write {path}: {e}', **context) from e
        return path


def _make_outdir(outdir):
    if os.path.isfile(outdir):
        raise ExtractionIOError(f'file with name "{outdir}" exists')
    try:
        os.makedirs(outdir, exist_ok=True)
    except OSError as e:
        raise ExtractionIOError(f'cannot create {outdir}: {e}') from e


def open_container(source, formats=FORMATS):
    """
    Opens a PAC container from a path or a seekable binary file and reads
    its header.
    """
    if isinstance(source, (str, bytes, os.PathLike)):
        f = open(source, 'rb')
        try:
            return PacContainer(f, formats, name=os.fsdecode(source), owns_file=True)
        except BaseException:
            f.close()
            raise
    return PacContainer(source, formats)


def validate(container):
    return container.validate()


def verify_checksums(container, progress=None):
    container.verify_checksums(progress)


def list_partitions(container):
    return container.list_partitions()


def extract_all(container, outdir, progress=None, names=None):
    return container.extract_all(outdir, progress, names)


def extract_partition(container, partition, outdir, progress=None):
    return container.extract_partition(partition, outdir, progress)
