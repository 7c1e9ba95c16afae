import collections
import struct

from .strings import NAME_LENGTH, decode_wide

VERSION_LENGTH = 24
ALIAS_LENGTH = 100

PAC_MAGIC = 0xfffafffa


PacHeader = collections.namedtuple('PacHeader',
    'version size product_name firmware_name '
    'partition_count partitions_offset '
    'mode flash_type nand_strategy is_nv_backup nand_page_type '
    'product_alias oma_dm_product_flag is_oma_dm is_preload '
    'magic crc1 crc2')

# index is the position in the partition table, not a format field
PartitionHeader = collections.namedtuple('PartitionHeader',
    'index length partition_name file_name size '
    'file_flag check_flag offset can_omit_flag addr_num addresses')


class PacFormat(object):
    """
    One generation of the PAC layout.

    A generation knows which version tags it accepts and how its header
    and partition headers are laid out. The reader picks the first
    generation in its list that accepts the file's version tag.
    """

    # 2124 bytes
    HEADER_FMT = struct.Struct(
        '<48s'  # szVersion, 24 units
        'I'  # dwSize, whole packet size
        '512s'  # productName
        '512s'  # firmwareName
        'I'  # partitionCount
        'I'  # partitionsListStart
        'IIIII'  # dwMode, dwFlashType, dwNandStrategy, dwIsNvBackup, dwNandPageType
        '200s'  # szPrdAlias, 100 units
        'III'  # dwOmaDmProductFlag, dwIsOmaDM, dwIsPreload
        '800s'  # dwReserved[200]
        'I'  # dwMagic
        'HH'  # wCRC1, wCRC2
        )

    # 2580 bytes
    PARTITION_FMT = struct.Struct(
        '<I'  # length of this record
        '512s'  # partitionName (file ID: FDL, NV, ...)
        '512s'  # fileName
        '512s'  # szFileName, reserved
        'I'  # partitionSize
        'I'  # nFileFlag
        'I'  # nCheckFlag
        'I'  # partitionAddrInPac
        'I'  # dwCanOmitFlag
        'I'  # dwAddrNum
        '5I'  # dwAddr
        '996s'  # dwReserved[249]
        )

    def __init__(self, name, versions, magic=PAC_MAGIC,
                 header_fmt=None, partition_fmt=None):
        self.name = name
        self.versions = tuple(versions)
        self.magic = magic
        if header_fmt is not None:
            self.HEADER_FMT = header_fmt
        if partition_fmt is not None:
            self.PARTITION_FMT = partition_fmt

    def __repr__(self):
        return f'PacFormat({self.name!r})'

    @property
    def header_size(self):
        return self.HEADER_FMT.size

    @property
    def partition_size(self):
        return self.PARTITION_FMT.size

    def read_version(self, data):
        return decode_wide(data[:VERSION_LENGTH * 2], VERSION_LENGTH)

    def accepts(self, data):
        return self.read_version(data) in self.versions

    def parse_header(self, data):
        (version, size, product_name, firmware_name,
            partition_count, partitions_offset,
            mode, flash_type, nand_strategy, is_nv_backup, nand_page_type,
            product_alias, oma_dm_product_flag, is_oma_dm, is_preload,
            reserved, magic, crc1, crc2) = self.HEADER_FMT.unpack(
                data[:self.header_size])
        return PacHeader(
            decode_wide(version, VERSION_LENGTH), size,
            decode_wide(product_name), decode_wide(firmware_name),
            partition_count, partitions_offset,
            mode, flash_type, nand_strategy, is_nv_backup, nand_page_type,
            decode_wide(product_alias, ALIAS_LENGTH),
            oma_dm_product_flag, is_oma_dm, is_preload,
            magic, crc1, crc2)

    def parse_partition(self, data, index):
        parsed = self.PARTITION_FMT.unpack(data[:self.partition_size])
        (length, partition_name, file_name, reserved_name,
            size, file_flag, check_flag, offset, can_omit_flag,
            addr_num) = parsed[:10]
        addresses = parsed[10:15]
        return PartitionHeader(
            index, length, decode_wide(partition_name, NAME_LENGTH),
            decode_wide(file_name, NAME_LENGTH), size,
            file_flag, check_flag, offset, can_omit_flag,
            addr_num, addresses)


BP_R1 = PacFormat('BP_R1', ('BP_R1.0.0',))

FORMATS = (BP_R1,)
