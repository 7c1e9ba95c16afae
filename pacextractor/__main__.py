#!/usr/bin/env python3

# This program is used for unpacking .pac file of Spreadtrum Firmware used in SPD Flash Tool for flashing.
# requires Python 3.7+
#
# Created : 31st January 2022
# Author  : HemanthJabalpuri
#
# This file has been put into the public domain.
# You can do whatever you want with this file.

import argparse
import logging
import os

from .errors import PacError
from .reader import open_container

fiveSpaces = ' ' * 5


def printP(name, value):
    print(f'{name.ljust(13)} = {value}')


def printPacHeader(ph):
    printP('Version', ph.version)
    printP('Size', ph.size)
    printP('PrdName', ph.product_name)
    printP('FirmwareName', ph.firmware_name)
    printP('FileCount', ph.partition_count)
    printP('FileOffset', ph.partitions_offset)
    printP('Mode', ph.mode)
    printP('FlashType', ph.flash_type)
    printP('NandStrategy', ph.nand_strategy)
    printP('IsNvBackup', ph.is_nv_backup)
    printP('NandPageType', ph.nand_page_type)
    printP('PrdAlias', ph.product_alias)
    printP('OmaDmPrdFlag', ph.oma_dm_product_flag)
    printP('IsOmaDM', ph.is_oma_dm)
    printP('IsPreload', ph.is_preload)
    printP('Magic', hex(ph.magic))
    printP('CRC1', ph.crc1)
    printP('CRC2', ph.crc2)
    print('\n')


def printFileHeader(fh):
    printP('Size', fh.length)
    printP('FileID', fh.partition_name)
    printP('FileName', fh.file_name)
    printP('FileSize', fh.size)
    printP('FileFlag', fh.file_flag)
    printP('CheckFlag', fh.check_flag)
    printP('DataOffset', fh.offset)
    printP('CanOmitFlag', fh.can_omit_flag)
    print()


def printCRCProgress():
    started = False

    def progress(stage, percent):
        nonlocal started
        if not started:
            # CRC1, when present, has passed by the time CRC2 reports
            print('Checking CRC Part 2')
            started = True
        print(f'\r{percent}%', end='')
        if percent == 100:
            print(f'\r{fiveSpaces}')
    return progress


def printProgress(fileNames):
    """Prints each file name and its percent counter, in extraction order."""
    fileNames = list(fileNames)
    current = None

    def progress(name, percent):
        nonlocal current
        if current is None:
            current = fileNames.pop(0) if fileNames else name
            print(f'{fiveSpaces}{current}', end='')
        print(f'\r{percent}%', end='')
        if percent == 100:
            print(f'\r{current}{fiveSpaces}')
            current = None
    return progress


def extract(pacfile, outdir=None, debug=False, checkCRC16=False, listOnly=False, names=None):
    if outdir is None:  # use 'outdir' as default output directory if None specified
        outdir = os.path.join(os.getcwd(), 'outdir')
    if not listOnly and os.path.isfile(outdir):
        raise SystemExit(f'file with name "{outdir}" exists')

    with open_container(pacfile) as pac:
        pac.validate()
        if debug:
            printPacHeader(pac.header)

        if checkCRC16:
            if pac.header.magic == pac.format.magic:
                print('Checking CRC Part 1')
            pac.verify_checksums(printCRCProgress())

        partitions = pac.list_partitions()
        if debug:
            for partition in partitions:
                printFileHeader(partition)

        if listOnly:
            for partition in partitions:
                print('%2d : %s -> %s (%d bytes @ 0x%x)' % (
                    partition.index, partition.partition_name,
                    partition.file_name, partition.size, partition.offset))
            return []

        print(f'\nExtracting to {outdir}\n')
        fileNames = [p.file_name for p in partitions
                     if p.size and (names is None or p.partition_name in names)]
        written = pac.extract_all(outdir, printProgress(fileNames), names)

    print('\nDone...')
    return written


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Extract partition images from a Spreadtrum .pac firmware')
    parser.add_argument('pacfile', help='Spreadtrum .pac file')
    parser.add_argument('outdir', nargs='?', help='output directory to extract files')
    parser.add_argument('-d', dest='debug', action='store_true', help='enable debug output')
    parser.add_argument('-c', dest='checkCRC16', action='store_true', help='compute and verify CRC16')
    parser.add_argument('-l', dest='listOnly', action='store_true', help='list partitions, do not extract')
    parser.add_argument('-p', dest='names', action='append', metavar='NAME',
                        help='only extract partition NAME (FileID), may be repeated')
    args = parser.parse_args(argv)

    logging.basicConfig(format='%(levelname)s %(name)s: %(message)s',
                        level=logging.DEBUG if args.debug else logging.WARNING)

    try:
        extract(args.pacfile, args.outdir, args.debug, args.checkCRC16, args.listOnly, args.names)
    except (PacError, OSError) as e:
        raise SystemExit(str(e))


if __name__ == '__main__':
    main()
