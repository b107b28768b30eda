"""
vCard decoding into a typed ContactRecord.

The decoder normalizes the source, tokenizes it with vobject and then runs
one rule per property kind. Rules never raise on odd field content: short
or overlong structured values, unknown GENDER codes and malformed dates
degrade to fewer or empty fields and are logged as anomalies. Only a source
that cannot be tokenized at all makes :meth:`Decoder.decode` return None.

Dependencies:
    - vobject: Tokenizer, wrapped by vcard_importer.vcard_parser
    - phonenumbers: Optional E.164 form of TEL values
    - logging: Standard library for logging
"""
# pylint: disable=logging-fstring-interpolation

import logging
from typing import Callable, List, Optional, Tuple
from typing import Type as TypingType

from vcard_importer import models
from vcard_importer.datetime_decoder import (
    COMPONENTS,
    decode_date_time,
    text_date_time,
)
from vcard_importer.models import (
    KIND_DEFAULT,
    PHONE_TYPE_DEFAULT,
    Address,
    ContactRecord,
    GenderCode,
    GenderValue,
    ImProtocol,
    ImProtocolName,
    KindValue,
    Param,
    TagValue,
)
from vcard_importer.normalizer import normalize_source
from vcard_importer.param_decoder import ParamDecoder, split_type_tokens
from vcard_importer.phone_normalizer import annotate_phones, validate_region_code
from vcard_importer.repository import InMemoryRepository, Repository
from vcard_importer.value_cache import ValueCache
from vcard_importer.vcard_parser import (
    Card,
    CardParseError,
    PropertyOccurrence,
    parse_card,
    split_escaped,
)

logger = logging.getLogger("vcard_importer")

# property, entity class, ContactRecord collection
MULTI_INSTANCE_FIELDS = [
    ('SOURCE', models.Source, 'sources'),
    ('FN', models.FormattedName, 'formatted_names'),
    ('PHOTO', models.Photo, 'photos'),
    ('EMAIL', models.Email, 'emails'),
    ('LANG', models.Language, 'languages'),
    ('TZ', models.Timezone, 'timezones'),
    ('GEO', models.Geo, 'geos'),
    ('TITLE', models.Title, 'titles'),
    ('ROLE', models.Role, 'roles'),
    ('LOGO', models.Logo, 'logos'),
    ('ORG', models.Org, 'orgs'),
    ('MEMBER', models.Member, 'members'),
    ('NOTE', models.Note, 'notes'),
    ('SOUND', models.Sound, 'sounds'),
    ('URL', models.Url, 'urls'),
    ('KEY', models.PublicKey, 'public_keys'),
    ('FBURL', models.Freebusy, 'freebusy'),
    ('CALURI', models.Calendar, 'calendars'),
    ('CALADRURI', models.CalendarRequest, 'calendar_requests'),
]

SINGLE_INSTANCE_FIELDS = [
    ('UID', models.Uid, 'uid'),
]

DATETIME_FIELDS = [
    ('BDAY', models.Birthday, 'birthday'),
    ('ANNIVERSARY', models.Anniversary, 'anniversary'),
]

NAME_COMPONENTS = [
    (models.FamilyName, 'family_names'),
    (models.GivenName, 'given_names'),
    (models.AdditionalName, 'additional_names'),
    (models.Prefix, 'prefixes'),
    (models.Suffix, 'suffixes'),
]

ADDRESS_FIELD_COUNT = 7

X_GENDER_MAP = {
    'male': GenderCode.M.value,
    'm': GenderCode.M.value,
    'female': GenderCode.F.value,
    'f': GenderCode.F.value,
}

# IMPP first, then the legacy per-network properties
IM_PROPERTIES: List[Tuple[str, Optional[ImProtocolName]]] = [
    ('IMPP', None),
    ('X-AIM', ImProtocolName.AIM),
    ('X-GADUGADU', ImProtocolName.GADUGADU),
    ('X-GROUPWISE', ImProtocolName.GROUPWISE),
    ('X-ICQ', ImProtocolName.ICQ),
    ('X-JABBER', ImProtocolName.JABBER),
    ('X-MSN', ImProtocolName.MSN),
    ('X-SKYPE', ImProtocolName.SKYPE),
    ('X-SKYPE-USERNAME', ImProtocolName.SKYPE),
    ('X-TWITTER', ImProtocolName.TWITTER),
    ('X-YAHOO', ImProtocolName.YAHOO),
]

# first match wins, so "aim" must be tried before "im"
URI_PROTOCOLS: List[Tuple[str, ImProtocolName]] = [
    ('xmpp', ImProtocolName.JABBER),
    ('aim', ImProtocolName.AIM),
    ('callto', ImProtocolName.SKYPE),
    ('gg', ImProtocolName.GADUGADU),
    ('gtalk', ImProtocolName.JABBER),
    ('msnim', ImProtocolName.MSN),
    ('skype', ImProtocolName.SKYPE),
    ('ymsgr', ImProtocolName.YAHOO),
    ('im', ImProtocolName.JABBER),
]


def detect_uri_protocol(value: str) -> Optional[ImProtocolName]:
    """
    Find the IM protocol of an IMPP URI.

    Args:
        value: IMPP value, e.g. ``xmpp:alice@example.com``

    Returns:
        Protocol of the first known ``scheme:`` found anywhere in the value,
        or None
    """
    lowered = value.lower()
    for scheme, protocol in URI_PROTOCOLS:
        if f"{scheme}:" in lowered:
            return protocol
    return None


class Decoder:
    """
    Decodes vCard documents into ContactRecord graphs.

    One Decoder is one decode session: it owns the ValueCache, so all
    records it produces share vocabulary entities. Use separate Decoder
    instances for documents decoded concurrently.
    """

    def __init__(
        self,
        repository: Optional[Repository] = None,
        phone_region: Optional[str] = None
    ):
        """
        Initialize the decoder.

        Args:
            repository: Vocabulary repository; in-memory if omitted
            phone_region: Two-letter region for E.164 phone normalization
        """
        self.repository = repository if repository is not None else InMemoryRepository()
        self.cache = ValueCache(self.repository)
        self.params = ParamDecoder(self.cache)
        self.anomalies: List[str] = []

        self.phone_region = None
        if phone_region:
            region = phone_region.strip().upper()
            if validate_region_code(region):
                self.phone_region = region
            else:
                logger.warning(
                    f"Invalid region code '{phone_region}', "
                    f"phone normalization disabled"
                )

    def decode(self, text: str) -> Optional[ContactRecord]:
        """
        Decode one vCard document.

        Args:
            text: vCard source text

        Returns:
            ContactRecord, or None if the text is not a parseable vCard
        """
        try:
            card = parse_card(normalize_source(text))
        except CardParseError as e:
            logger.debug(f"vCard not decoded: {e}")
            return None

        self.anomalies = []
        for problem in card.skipped:
            self._anomaly(f"skipped undecodable property: {problem}")
        record = ContactRecord()
        for rule in self._rules():
            rule(card, record)

        logger.debug(
            f"Decoded vCard with {record.entity_count()} entities, "
            f"{len(self.anomalies)} field anomalies"
        )
        return record

    def _rules(self) -> List[Callable[[Card, ContactRecord], None]]:
        rules: List[Callable[[Card, ContactRecord], None]] = [self._decode_kind]
        rules.extend(
            self._multi_instance_rule(*entry) for entry in MULTI_INSTANCE_FIELDS
        )
        rules.extend(
            self._single_instance_rule(*entry) for entry in SINGLE_INSTANCE_FIELDS
        )
        rules.extend(
            self._datetime_rule(*entry) for entry in DATETIME_FIELDS
        )
        rules.extend([
            self._decode_name,
            self._decode_nickname,
            self._decode_gender,
            self._decode_address,
            self._decode_phone,
            self._decode_relation,
            self._decode_im,
            self._decode_tag,
        ])
        return rules

    def _anomaly(self, message: str) -> None:
        self.anomalies.append(message)
        logger.debug(f"Field anomaly: {message}")

    # Generic rule shapes

    def decode_multiple(
        self,
        occurrences: List[PropertyOccurrence],
        entity_class: TypingType[models.ValueEntity]
    ) -> List[models.ValueEntity]:
        """One entity per occurrence, in encounter order."""
        return [
            entity_class(value=occurrence.text, param=self.params.import_param(occurrence))
            for occurrence in occurrences
        ]

    def decode_single(
        self,
        occurrences: List[PropertyOccurrence],
        entity_class: TypingType[models.ValueEntity]
    ) -> Optional[models.ValueEntity]:
        """Entity for the first occurrence only."""
        if not occurrences:
            return None
        return self.decode_multiple(occurrences[:1], entity_class)[0]

    def decode_multiple_with_type(
        self,
        occurrences: List[PropertyOccurrence],
        entity_class: TypingType[models.TypedValueEntity]
    ) -> List[models.TypedValueEntity]:
        """As :meth:`decode_multiple`, with TYPE tokens attached as types."""
        entities = []
        for occurrence in occurrences:
            entity = entity_class(
                value=occurrence.text,
                param=self.params.import_param(occurrence)
            )
            entity.types = self.params.resolve_types(occurrence)
            entities.append(entity)
        return entities

    def decode_single_datetime(
        self,
        occurrences: List[PropertyOccurrence],
        entity_class: TypingType[models.DatedEntity]
    ) -> Optional[models.DatedEntity]:
        """Date-time entity for the first occurrence only."""
        if not occurrences:
            return None
        occurrence = occurrences[0]
        if occurrence.param('VALUE') == 'text':
            value = text_date_time(occurrence.text)
        else:
            value = decode_date_time(occurrence.text)
            if all(getattr(value, name) is None for name in COMPONENTS):
                self._anomaly(f"{occurrence.name}: unrecognized date-time {occurrence.value!r}")
        return entity_class(value=value, param=self.params.import_param(occurrence))

    def _multi_instance_rule(self, property_name, entity_class, collection):
        def rule(card: Card, record: ContactRecord) -> None:
            getattr(record, collection).extend(
                self.decode_multiple(card.get(property_name), entity_class)
            )
        return rule

    def _single_instance_rule(self, property_name, entity_class, attribute):
        def rule(card: Card, record: ContactRecord) -> None:
            entity = self.decode_single(card.get(property_name), entity_class)
            if entity is not None:
                setattr(record, attribute, entity)
        return rule

    def _datetime_rule(self, property_name, entity_class, attribute):
        def rule(card: Card, record: ContactRecord) -> None:
            entity = self.decode_single_datetime(card.get(property_name), entity_class)
            if entity is not None:
                setattr(record, attribute, entity)
        return rule

    # Special rules

    def _decode_kind(self, card: Card, record: ContactRecord) -> None:
        """KIND, defaulting to "individual"; always produces a Kind."""
        occurrence = card.first('KIND')
        if occurrence is not None and occurrence.text:
            value = occurrence.text
            param = self.params.import_param(occurrence)
        else:
            value = KIND_DEFAULT
            param = Param()
        record.kind = models.Kind(value=self.cache.resolve(KindValue, value), param=param)

    def _decode_name(self, card: Card, record: ContactRecord) -> None:
        """N: five positional slots, each comma-split into components."""
        occurrence = card.first('N')
        if occurrence is None:
            return

        name = models.Name(param=self.params.import_param(occurrence))
        slots = split_escaped(occurrence.value, ';', unescape=False)
        if len(slots) != len(NAME_COMPONENTS):
            self._anomaly(f"N: expected {len(NAME_COMPONENTS)} components, got {len(slots)}")

        for slot, (component_class, attribute) in zip(slots, NAME_COMPONENTS):
            if not slot:
                continue
            getattr(name, attribute).extend(
                component_class(value) for value in split_escaped(slot, ',')
            )
        record.names.append(name)

    def _decode_nickname(self, card: Card, record: ContactRecord) -> None:
        for occurrence in card.get('NICKNAME'):
            record.nicknames.append(models.Nickname(
                param=self.params.import_param(occurrence),
                values=[
                    models.NicknameValue(value)
                    for value in split_escaped(occurrence.value, ',')
                ],
            ))

    def _decode_gender(self, card: Card, record: ContactRecord) -> None:
        """
        GENDER, falling back to the non-standard X-GENDER.

        X-GENDER only counts when it maps to M or F; anything else is
        treated as absent.
        """
        occurrence = card.first('GENDER')
        raw = occurrence.value if occurrence is not None else ''
        if raw == '' and 'X-GENDER' in card:
            fallback = card.first('X-GENDER')
            mapped = X_GENDER_MAP.get(fallback.text.strip().lower())
            if mapped:
                occurrence, raw = fallback, mapped
        if not raw:
            return

        pieces = split_escaped(raw, ';', maxsplit=1)
        value = pieces[0]
        comment = pieces[1] if len(pieces) > 1 else ''
        gender = models.Gender(
            param=self.params.import_param(occurrence),
            comment=comment,
        )
        if GenderCode.is_valid(value):
            gender.value = self.cache.resolve(GenderValue, value)
        else:
            self._anomaly(f"GENDER: unknown sex component {value!r}")
        record.gender = gender

    def _decode_address(self, card: Card, record: ContactRecord) -> None:
        """ADR: seven positional fields; PO box, extended and street are joined."""
        for occurrence in card.get('ADR'):
            address = Address(param=self.params.import_param(occurrence))
            parts = split_escaped(occurrence.value, ';')
            if len(parts) != ADDRESS_FIELD_COUNT:
                self._anomaly(f"ADR: expected {ADDRESS_FIELD_COUNT} fields, got {len(parts)}")
            parts = (parts + [''] * ADDRESS_FIELD_COUNT)[:ADDRESS_FIELD_COUNT]
            po_box, extended, street, locality, region, postal_code, country = parts

            address.street = "\n".join(part for part in (po_box, extended, street) if part)
            address.locality = locality
            address.region = region
            address.postal_code = postal_code
            address.country = country
            record.addresses.append(address)

    def _decode_phone(self, card: Card, record: ContactRecord) -> None:
        """TEL, every phone getting at least the default "voice" type."""
        occurrences = [
            occurrence if split_type_tokens(occurrence.param_values('TYPE'))
            else occurrence.with_param('TYPE', [PHONE_TYPE_DEFAULT])
            for occurrence in card.get('TEL')
        ]
        phones = self.decode_multiple_with_type(occurrences, models.Phone)
        if self.phone_region and phones:
            normalized, failed = annotate_phones(phones, self.phone_region)
            logger.debug(f"Phones normalized: {normalized}, failed: {failed}")
        record.phones.extend(phones)

    def _decode_relation(self, card: Card, record: ContactRecord) -> None:
        record.relations.extend(
            self.decode_multiple_with_type(card.get('RELATED'), models.Relation)
        )

    def _decode_im(self, card: Card, record: ContactRecord) -> None:
        """IMPP and the legacy X-AIM, X-SKYPE, ... properties."""
        for property_name, implicit_protocol in IM_PROPERTIES:
            for occurrence in card.get(property_name):
                im = models.Im(
                    value=occurrence.text,
                    param=self.params.import_param(occurrence)
                )
                protocol = implicit_protocol
                if property_name == 'IMPP':
                    protocol = detect_uri_protocol(im.value)
                    if protocol is None:
                        self._anomaly(f"IMPP: no known URI scheme in {im.value!r}")
                    else:
                        im.is_uri = True
                if protocol is not None:
                    im.protocol = self.cache.resolve(ImProtocol, protocol.value)
                record.ims.append(im)

    def _decode_tag(self, card: Card, record: ContactRecord) -> None:
        """CATEGORIES: one Tag per occurrence, empty tokens dropped."""
        for occurrence in card.get('CATEGORIES'):
            record.tags.append(models.Tag(
                param=self.params.import_param(occurrence),
                values=[
                    self.cache.resolve(TagValue, token)
                    for token in split_escaped(occurrence.value, ',')
                    if token
                ],
            ))


def decode(text: str, repository: Optional[Repository] = None) -> Optional[ContactRecord]:
    """
    Decode one vCard document in a fresh session.

    Args:
        text: vCard source text
        repository: Vocabulary repository; in-memory if omitted

    Returns:
        ContactRecord, or None if the text is not a parseable vCard
    """
    return Decoder(repository=repository).decode(text)
