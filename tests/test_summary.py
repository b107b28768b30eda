import json

import pytest

from vcard_importer import decode
from vcard_importer.summary import save_summary_to_file, summarize_record


def test_summarize_record(full_vcard: str) -> None:
    summary = summarize_record(decode(full_vcard))

    assert summary['kind'] == 'individual'
    assert summary['formatted_names'] == ['Alice Smith']
    assert summary['names'][0]['additional'] == ['Jane', 'Mary']
    assert summary['nicknames'] == [['Ali', 'Al']]
    assert summary['phones'][0]['types'] == ['work', 'voice']
    assert summary['phones'][2]['types'] == ['voice']
    assert summary['phones'][0]['e164'] is None
    assert summary['addresses'][0]['locality'] == 'Springfield'
    assert summary['addresses'][0]['types'] == ['home']
    assert summary['ims'][0] == {
        'value': 'xmpp:alice@example.com', 'protocol': 'jabber', 'is_uri': True,
    }
    assert summary['tags'] == ['friends', 'work']
    assert summary['birthday'] == {'format': 'partial', 'year': 1985, 'month': 3, 'day': 5}
    assert summary['anniversary']['format'] == 'full'
    assert summary['anniversary']['timestamp'] == '1996-04-15T12:30:00+00:00'
    assert summary['gender'] == {'value': 'F', 'comment': 'she/her'}
    assert summary['counts']['phones'] == 3
    assert 'photos' not in summary['counts']


def test_summarize_minimal_record(vcard) -> None:
    summary = summarize_record(decode(vcard("FN:Bob")))

    assert summary['kind'] == 'individual'
    assert summary['uid'] is None
    assert summary['birthday'] is None
    assert summary['gender'] is None
    assert summary['counts'] == {'formatted_names': 1}


def test_save_summary_to_file(tmp_path, vcard) -> None:
    output = tmp_path / "out" / "summary.json"
    records = [decode(vcard("FN:Bob")), None]

    save_summary_to_file(output, records, {'total_cards': 2})

    data = json.loads(output.read_text(encoding='utf-8'))
    assert data['statistics'] == {'total_cards': 2}
    assert data['cards'][0]['formatted_names'] == ['Bob']
    assert data['cards'][1] is None


def test_save_summary_leaves_no_file_when_encoding_fails(tmp_path, vcard) -> None:
    output = tmp_path / "summary.json"
    record = decode(vcard("FN:Bob"))
    record.formatted_names[0].value = "Bob\ud800"

    with pytest.raises(UnicodeEncodeError):
        save_summary_to_file(output, [record])

    assert not output.exists()
