#!/usr/bin/env python3
"""
Main entry point for the vCard importer.

This module provides the command-line interface: it reads a .vcf file,
decodes every vCard in it and reports what was found.

Dependencies:
    - argparse: Standard library for command-line argument parsing
    - sys: Standard library for system-specific parameters
    - pathlib: Standard library for path handling
    - vcard_importer.decoder: Local module for vCard decoding
    - vcard_importer.vcard_parser: Local module for reading .vcf files
    - vcard_importer.summary: Local module for JSON summaries
    - vcard_importer.logger: Local module for logging configuration
"""
# pylint: disable=logging-fstring-interpolation, broad-except

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from vcard_importer.decoder import Decoder
from vcard_importer.logger import log_decode_result, log_statistics, setup_logger
from vcard_importer.models import ContactRecord
from vcard_importer.repository import InMemoryRepository
from vcard_importer.summary import save_summary_to_file
from vcard_importer.vcard_parser import read_vcard_blocks


def _create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    :return: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description='Decode vCard contacts into typed contact records',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--input', '-i',
        type=str,
        required=True,
        help='Path to input vCard file (.vcf)'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )

    parser.add_argument(
        '--phone-region',
        type=str,
        default=None,
        metavar='CODE',
        help='2-letter country code used to normalize phone numbers to '
             'E.164 (e.g., US, GB, NL). Normalization is off if omitted.'
    )

    parser.add_argument(
        '--summary',
        type=str,
        dest='summary_output',
        help='Write a JSON summary of the decoded cards (provide path)'
    )

    return parser


def decode_blocks(
    blocks: List[str],
    phone_region: Optional[str],
    logger: Any
) -> Tuple[List[Optional[ContactRecord]], Dict[str, Any]]:
    """
    Decode each vCard block in its own session.

    All sessions share one repository, so vocabulary entries are
    deduplicated across the whole file.

    :param blocks: vCard block strings
    :param phone_region: Region code for phone normalization, or None
    :param logger: Logger instance
    :return: Tuple of (records, statistics dictionary)
    """
    repository = InMemoryRepository()
    records: List[Optional[ContactRecord]] = []
    anomalies = 0

    for index, block in enumerate(blocks, 1):
        decoder = Decoder(repository=repository, phone_region=phone_region)
        record = decoder.decode(block)
        anomalies += len(decoder.anomalies) if record is not None else 0
        log_decode_result(logger, index, record)
        records.append(record)

    decoded = [record for record in records if record is not None]
    stats = {
        'total_cards': len(records),
        'decoded_cards': len(decoded),
        'failed_cards': len(records) - len(decoded),
        'total_entities': sum(record.entity_count() for record in decoded),
        'vocabulary_entries': len(repository),
        'field_anomalies': anomalies,
    }
    return records, stats


def main(argv: Optional[List[str]] = None) -> None:
    """Main application entry point."""
    parser = _create_argument_parser()
    args = parser.parse_args(argv)

    logger = setup_logger(log_level=args.log_level)

    try:
        input_path = Path(args.input)
        logger.info(f"Reading contacts from {input_path}")
        blocks = read_vcard_blocks(input_path)

        if not blocks:
            logger.error("No vCards found in input file")
            sys.exit(1)

        records, stats = decode_blocks(blocks, args.phone_region, logger)
        log_statistics(logger, stats)

        if args.summary_output:
            save_summary_to_file(Path(args.summary_output), records, stats)

        if not stats['decoded_cards']:
            logger.error("None of the vCards could be decoded")
            sys.exit(1)

        logger.info("vCard import completed successfully!")

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
