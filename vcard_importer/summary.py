"""
JSON summaries of decoded contact records.

This module turns ContactRecord graphs into plain dictionaries for
inspection and writes them to disk for the command-line tool.

Dependencies:
    - json: Standard library for JSON serialization
    - pathlib: Standard library for path handling
    - logging: Standard library for logging
"""
# pylint: disable=logging-fstring-interpolation

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from vcard_importer.models import ContactRecord, DateTimeText, Param

logger = logging.getLogger("vcard_importer")


def _param_types(param: Param) -> List[str]:
    return [item.value for item in param.types]


def _date_time(date_time: DateTimeText) -> Dict[str, Any]:
    summary: Dict[str, Any] = {'format': date_time.format.value}
    if date_time.text_value:
        summary['text'] = date_time.text_value
    for name in ('year', 'month', 'day', 'hour', 'minute', 'second', 'timezone'):
        value = getattr(date_time, name)
        if value is not None:
            summary[name] = value
    if date_time.value is not None:
        summary['timestamp'] = date_time.value.isoformat()
    return summary


def summarize_record(record: ContactRecord) -> Dict[str, Any]:
    """
    Build a JSON-serializable summary of one record.

    :param record: Decoded contact record
    :return: Summary dictionary
    """
    summary: Dict[str, Any] = {
        'kind': record.kind.value.value if record.kind else None,
        'uid': record.uid.value if record.uid else None,
        'formatted_names': [item.value for item in record.formatted_names],
        'names': [
            {
                'family': [c.value for c in name.family_names],
                'given': [c.value for c in name.given_names],
                'additional': [c.value for c in name.additional_names],
                'prefixes': [c.value for c in name.prefixes],
                'suffixes': [c.value for c in name.suffixes],
            }
            for name in record.names
        ],
        'nicknames': [
            [item.value for item in nickname.values] for nickname in record.nicknames
        ],
        'phones': [
            {
                'value': phone.value,
                'types': [item.value for item in phone.types],
                'e164': phone.e164,
            }
            for phone in record.phones
        ],
        'emails': [
            {'value': email.value, 'types': _param_types(email.param)}
            for email in record.emails
        ],
        'addresses': [
            {
                'street': address.street,
                'locality': address.locality,
                'region': address.region,
                'postal_code': address.postal_code,
                'country': address.country,
                'types': _param_types(address.param),
            }
            for address in record.addresses
        ],
        'ims': [
            {
                'value': im.value,
                'protocol': im.protocol.value if im.protocol else None,
                'is_uri': im.is_uri,
            }
            for im in record.ims
        ],
        'tags': sorted({value.value for tag in record.tags for value in tag.values}),
        'birthday': _date_time(record.birthday.value) if record.birthday else None,
        'anniversary': _date_time(record.anniversary.value) if record.anniversary else None,
        'gender': None,
        'counts': {
            name: len(entities)
            for name, entities in record.collections().items()
            if entities
        },
    }
    if record.gender is not None:
        summary['gender'] = {
            'value': record.gender.value.value if record.gender.value else None,
            'comment': record.gender.comment,
        }
    return summary


def save_summary_to_file(
    file_path: Path,
    records: List[Optional[ContactRecord]],
    statistics: Optional[Dict[str, Any]] = None
) -> None:
    """
    Write record summaries to a JSON file.

    :param file_path: Output path
    :param records: Decoded records; None entries (failed cards) are kept
                    as null to preserve card positions
    :param statistics: Optional statistics dictionary to include
    """
    data = {
        'statistics': statistics or {},
        'cards': [
            summarize_record(record) if record is not None else None
            for record in records
        ],
    }
    # encoded before the file is opened
    content = json.dumps(data, indent=2, ensure_ascii=False).encode('utf-8')
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(content)
    logger.info(f"Summary saved to: {file_path}")
