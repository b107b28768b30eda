from vcard_importer.models import Param
from vcard_importer.param_decoder import ParamDecoder, split_type_tokens
from vcard_importer.value_cache import ValueCache
from vcard_importer.vcard_parser import PropertyOccurrence


def test_split_type_tokens() -> None:
    assert split_type_tokens(["work,,voice", "work", ""]) == ["work", "voice"]
    assert split_type_tokens([]) == []


def test_import_param_fields() -> None:
    decoder = ParamDecoder(ValueCache())
    occurrence = PropertyOccurrence(
        name="ADR",
        value=";;1 Main St;;;;",
        params={
            "ALTID": ["1"],
            "GEO": ["geo:12.3,45.6"],
            "LABEL": ["1 Main St"],
            "LANGUAGE": ["en"],
            "MEDIATYPE": ["text/plain"],
            "PREF": ["2"],
            "SORT-AS": ["Main", "St"],
            "TZ": ["Europe/Amsterdam"],
            "VALUE": ["text"],
            "TYPE": ["home,postal"],
        },
    )

    param = decoder.import_param(occurrence)

    assert param.alt_id == "1"
    assert param.geo == "geo:12.3,45.6"
    assert param.label == "1 Main St"
    assert param.language == "en"
    assert param.media_type == "text/plain"
    assert param.pref == "2"
    assert param.sort_as == "Main,St"
    assert param.timezone == "Europe/Amsterdam"
    assert param.value_type.value == "text"
    assert [t.value for t in param.types] == ["home", "postal"]
    assert not param.is_empty()


def test_import_param_without_parameters_is_empty() -> None:
    param = ParamDecoder(ValueCache()).import_param(PropertyOccurrence(name="FN", value="Alice"))

    assert param == Param()
    assert param.is_empty()
    assert param.value_type is None


def test_types_are_shared_between_occurrences() -> None:
    decoder = ParamDecoder(ValueCache())
    home = PropertyOccurrence(name="TEL", value="1", params={"TYPE": ["home"]})
    home_fax = PropertyOccurrence(name="TEL", value="2", params={"TYPE": ["fax", "home"]})

    first = decoder.resolve_types(home)
    second = decoder.resolve_types(home_fax)

    assert [t.value for t in second] == ["fax", "home"]
    assert second[1] is first[0]
