"""
Typed contact record graph produced by the decoder.

Value entities carry the raw (unescaped) property value plus the Param
imported from the property instance. Vocabulary entities are value-unique
within a decode session and compare by identity, so two phones tagged
``work`` point at the very same Type object.

Dependencies:
    - dataclasses: Standard library for record types
    - datetime: Standard library for resolved timestamps
    - enum: Standard library for closed vocabularies
    - typing: Standard library for type hints
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import List, Optional

KIND_DEFAULT = "individual"
PHONE_TYPE_DEFAULT = "voice"


class DateTimeFormat(Enum):
    FULL = "full"
    PARTIAL = "partial"
    TEXT = "text"


class GenderCode(str, Enum):
    """Sex component of GENDER."""

    M = "M"
    F = "F"
    O = "O"  # noqa: E741
    N = "N"
    U = "U"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in {member.value for member in cls}


class ImProtocolName(str, Enum):
    AIM = "aim"
    GADUGADU = "gadugadu"
    GROUPWISE = "groupwise"
    ICQ = "icq"
    JABBER = "jabber"
    MSN = "msn"
    SKYPE = "skype"
    TWITTER = "twitter"
    YAHOO = "yahoo"


# Vocabulary entities

@dataclass(eq=False)
class VocabularyEntity:
    value: str

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class Type(VocabularyEntity):
    pass


class ParamValueType(VocabularyEntity):
    pass


class ImProtocol(VocabularyEntity):
    pass


class TagValue(VocabularyEntity):
    pass


class KindValue(VocabularyEntity):
    pass


class GenderValue(VocabularyEntity):
    pass


@dataclass
class Param:
    """Parameter metadata of one property instance."""

    alt_id: str = ""
    geo: str = ""
    label: str = ""
    language: str = ""
    media_type: str = ""
    pref: str = ""
    sort_as: str = ""
    timezone: str = ""
    value_type: Optional[ParamValueType] = None
    types: List[Type] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.alt_id or self.geo or self.label or self.language
            or self.media_type or self.pref or self.sort_as or self.timezone
            or self.value_type or self.types
        )


# Value entities

@dataclass
class ValueEntity:
    value: str = ""
    param: Param = field(default_factory=Param)


class Source(ValueEntity):
    pass


class FormattedName(ValueEntity):
    pass


class Photo(ValueEntity):
    pass


class Email(ValueEntity):
    pass


class Language(ValueEntity):
    pass


class Timezone(ValueEntity):
    pass


class Geo(ValueEntity):
    pass


class Title(ValueEntity):
    pass


class Role(ValueEntity):
    pass


class Logo(ValueEntity):
    pass


class Org(ValueEntity):
    pass


class Member(ValueEntity):
    pass


class Note(ValueEntity):
    pass


class Sound(ValueEntity):
    pass


class Uid(ValueEntity):
    pass


class Url(ValueEntity):
    pass


class PublicKey(ValueEntity):
    pass


class Freebusy(ValueEntity):
    pass


class Calendar(ValueEntity):
    pass


class CalendarRequest(ValueEntity):
    pass


@dataclass
class TypedValueEntity(ValueEntity):
    types: List[Type] = field(default_factory=list)


@dataclass
class Phone(TypedValueEntity):
    e164: Optional[str] = None


class Relation(TypedValueEntity):
    pass


@dataclass
class Im(ValueEntity):
    protocol: Optional[ImProtocol] = None
    is_uri: bool = False


# Name components

@dataclass
class NameComponent:
    value: str


class FamilyName(NameComponent):
    pass


class GivenName(NameComponent):
    pass


class AdditionalName(NameComponent):
    pass


class Prefix(NameComponent):
    pass


class Suffix(NameComponent):
    pass


@dataclass
class Name:
    param: Param = field(default_factory=Param)
    family_names: List[FamilyName] = field(default_factory=list)
    given_names: List[GivenName] = field(default_factory=list)
    additional_names: List[AdditionalName] = field(default_factory=list)
    prefixes: List[Prefix] = field(default_factory=list)
    suffixes: List[Suffix] = field(default_factory=list)


@dataclass
class NicknameValue:
    value: str


@dataclass
class Nickname:
    param: Param = field(default_factory=Param)
    values: List[NicknameValue] = field(default_factory=list)


@dataclass
class Tag:
    param: Param = field(default_factory=Param)
    values: List[TagValue] = field(default_factory=list)


@dataclass
class Address:
    param: Param = field(default_factory=Param)
    street: str = ""
    locality: str = ""
    region: str = ""
    postal_code: str = ""
    country: str = ""


@dataclass
class Kind:
    value: KindValue
    param: Param = field(default_factory=Param)


@dataclass
class Gender:
    param: Param = field(default_factory=Param)
    value: Optional[GenderValue] = None
    comment: str = ""


@dataclass
class DateTimeText:
    format: DateTimeFormat = DateTimeFormat.PARTIAL
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    hour: Optional[int] = None
    minute: Optional[int] = None
    second: Optional[int] = None
    timezone: Optional[str] = None
    value: Optional[datetime] = None
    text_value: str = ""


@dataclass
class DatedEntity:
    value: DateTimeText = field(default_factory=DateTimeText)
    param: Param = field(default_factory=Param)


class Birthday(DatedEntity):
    pass


class Anniversary(DatedEntity):
    pass


@dataclass
class ContactRecord:
    """Root aggregate of one decoded vCard."""

    kind: Optional[Kind] = None
    birthday: Optional[Birthday] = None
    anniversary: Optional[Anniversary] = None
    gender: Optional[Gender] = None
    uid: Optional[Uid] = None
    sources: List[Source] = field(default_factory=list)
    formatted_names: List[FormattedName] = field(default_factory=list)
    names: List[Name] = field(default_factory=list)
    nicknames: List[Nickname] = field(default_factory=list)
    photos: List[Photo] = field(default_factory=list)
    addresses: List[Address] = field(default_factory=list)
    phones: List[Phone] = field(default_factory=list)
    emails: List[Email] = field(default_factory=list)
    ims: List[Im] = field(default_factory=list)
    languages: List[Language] = field(default_factory=list)
    timezones: List[Timezone] = field(default_factory=list)
    geos: List[Geo] = field(default_factory=list)
    titles: List[Title] = field(default_factory=list)
    roles: List[Role] = field(default_factory=list)
    logos: List[Logo] = field(default_factory=list)
    orgs: List[Org] = field(default_factory=list)
    members: List[Member] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    sounds: List[Sound] = field(default_factory=list)
    urls: List[Url] = field(default_factory=list)
    public_keys: List[PublicKey] = field(default_factory=list)
    freebusy: List[Freebusy] = field(default_factory=list)
    calendars: List[Calendar] = field(default_factory=list)
    calendar_requests: List[CalendarRequest] = field(default_factory=list)

    def collections(self) -> dict:
        """Map collection field names to their entity lists."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if isinstance(getattr(self, f.name), list)
        }

    def entity_count(self) -> int:
        """Number of top-level entities, singular fields included."""
        singular = sum(
            1 for item in (
                self.kind, self.birthday, self.anniversary,
                self.gender, self.uid,
            )
            if item is not None
        )
        return singular + sum(len(items) for items in self.collections().values())
