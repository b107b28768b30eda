"""
Logging configuration and utilities for the vCard importer.

This module provides logging setup and utility functions for structured
logging throughout the application.

Dependencies:
    - logging: Standard library for logging functionality
    - sys: Standard library for system-specific parameters
    - pathlib: Standard library for path handling
    - datetime: Standard library for date/time operations
    - typing: Standard library for type hints
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from logging import Logger

from vcard_importer.models import ContactRecord

LOGGER_NAME = "vcard_importer"


def setup_logger(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True
) -> Logger:
    """
    Set up and configure the application logger.

    :param log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    :param log_file: Optional path to log file. If None, creates timestamped
                     log in logs/
    :param console_output: Whether to output logs to console
    :return: Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    simple_formatter = logging.Formatter(
        '%(levelname)s: %(message)s'
    )

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

    if log_file is None:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = logs_dir / f"import_{timestamp}.log"

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(detailed_formatter)
    logger.addHandler(file_handler)

    logger.info("Logging initialized. Log file: %s", log_file)

    return logger


def log_decode_result(
    logger: Logger,
    card_index: int,
    record: Optional[ContactRecord]
) -> None:
    """
    Log the outcome of decoding one vCard block.

    :param logger: Logger instance
    :param card_index: 1-based position of the card in the input
    :param record: Decoded record, or None if the card could not be parsed
    """
    if record is None:
        logger.warning(f"Card #{card_index}: could not be parsed, skipped")
        return

    name = record.formatted_names[0].value if record.formatted_names else 'Unknown'
    logger.info(f"Card #{card_index}: {name}")
    logger.debug(f"  Entities: {record.entity_count()}")
    for collection, entities in record.collections().items():
        if entities:
            logger.debug(f"  {collection}: {len(entities)}")


def log_statistics(logger: Logger, stats: Dict[str, Any]) -> None:
    """
    Log summary statistics.

    :param logger: Logger instance
    :param stats: Dictionary containing statistics
    """
    logger.info("=" * 60)
    logger.info("IMPORT SUMMARY")
    logger.info("=" * 60)
    logger.info(f"vCards read: {stats.get('total_cards', 0)}")
    logger.info(f"vCards decoded: {stats.get('decoded_cards', 0)}")
    logger.info(f"vCards failed: {stats.get('failed_cards', 0)}")
    logger.info(f"Entities created: {stats.get('total_entities', 0)}")
    logger.info(f"Vocabulary entries: {stats.get('vocabulary_entries', 0)}")
    logger.info(f"Field anomalies: {stats.get('field_anomalies', 0)}")
    logger.info("=" * 60)
