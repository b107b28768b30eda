from vcard_importer.normalizer import normalize_source


def test_text_without_begin_marker_is_dropped() -> None:
    assert normalize_source("") == ""
    assert normalize_source("FN:Alice\r\n") == ""
    assert normalize_source("\r\nBEGIN:VCARD\r\nEND:VCARD\r\n") == ""


def test_begin_marker_is_case_insensitive() -> None:
    text = "begin:vcard\r\nFN:Alice\r\nend:vcard\r\n"

    assert normalize_source(text) == text


def test_unicode_escapes_are_replaced() -> None:
    text = "BEGIN:VCARD\r\nFN:Ren<U+00E9> M<u+00fc>ller\r\nEND:VCARD\r\n"

    assert normalize_source(text) == "BEGIN:VCARD\r\nFN:René Müller\r\nEND:VCARD\r\n"


def test_incomplete_unicode_escape_is_kept() -> None:
    text = "BEGIN:VCARD\r\nNOTE:<U+00E> and <U+ZZZZ>\r\nEND:VCARD\r\n"

    assert normalize_source(text) == text


def test_indented_continuations_collapse_to_one_fold() -> None:
    text = "BEGIN:VCARD\nNOTE:first\n\t   second\nEND:VCARD\n"

    assert normalize_source(text) == "BEGIN:VCARD\nNOTE:first\n second\nEND:VCARD\n"


def test_surrogate_escapes_become_replacement_character() -> None:
    text = "BEGIN:VCARD\r\nFN:A<U+D800><u+dfff>\r\nEND:VCARD\r\n"

    assert normalize_source(text) == "BEGIN:VCARD\r\nFN:A\ufffd\ufffd\r\nEND:VCARD\r\n"
