from .crc16 import crc16
from .errors import (
    PacError, FormatTooSmall, TruncatedHeader, TruncatedDescriptor,
    SizeMismatch, UnsupportedVersion, UnknownDescriptorFormat,
    ChecksumMismatch, ExtractionIOError, UnsafeFileName, PayloadOutOfBounds)
from .formats import BP_R1, FORMATS, PAC_MAGIC, PacFormat, PacHeader, PartitionHeader
from .reader import (
    PacContainer, State, open_container, validate, verify_checksums,
    list_partitions, extract_all, extract_partition, safe_file_name)
from .strings import decode_wide, encode_wide

__version__ = '0.1.0'
