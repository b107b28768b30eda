"""
Builds the Param object attached to every property-derived entity.
"""

import logging
from typing import Iterable, List

from vcard_importer.models import Param, ParamValueType, Type
from vcard_importer.value_cache import ValueCache
from vcard_importer.vcard_parser import PropertyOccurrence

logger = logging.getLogger("vcard_importer")

# parameter name -> Param attribute
PARAM_FIELDS = {
    'ALTID': 'alt_id',
    'GEO': 'geo',
    'LABEL': 'label',
    'LANGUAGE': 'language',
    'MEDIATYPE': 'media_type',
    'PREF': 'pref',
    'SORT-AS': 'sort_as',
    'TZ': 'timezone',
}


def split_type_tokens(values: Iterable[str]) -> List[str]:
    """
    Comma-expand TYPE parameter values, dropping empty tokens.

    Args:
        values: TYPE parameter values, each possibly comma-separated

    Returns:
        Ordered list of non-empty tokens, duplicates removed
    """
    tokens = []
    for value in values:
        for token in value.split(','):
            if token and token not in tokens:
                tokens.append(token)
    return tokens


class ParamDecoder:
    """
    Imports the common parameters of a property occurrence.
    """

    def __init__(self, cache: ValueCache):
        self.cache = cache

    def resolve_types(self, occurrence: PropertyOccurrence) -> List[Type]:
        """
        Resolve the TYPE tokens of an occurrence to shared Type entities.

        Args:
            occurrence: Property occurrence

        Returns:
            Type entities in token order
        """
        return [
            self.cache.resolve(Type, token)
            for token in split_type_tokens(occurrence.param_values('TYPE'))
        ]

    def import_param(self, occurrence: PropertyOccurrence) -> Param:
        """
        Build the Param of one property occurrence.

        Args:
            occurrence: Property occurrence

        Returns:
            Param, never None; fields are empty strings when absent
        """
        param = Param()
        for param_name, attribute in PARAM_FIELDS.items():
            setattr(param, attribute, occurrence.param(param_name))

        value_type = occurrence.param('VALUE')
        if value_type:
            param.value_type = self.cache.resolve(ParamValueType, value_type)

        param.types = self.resolve_types(occurrence)
        return param
