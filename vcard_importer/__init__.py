"""
Decode vCard documents into typed contact record graphs.
"""

from vcard_importer.decoder import Decoder, decode
from vcard_importer.models import ContactRecord
from vcard_importer.repository import InMemoryRepository, Repository
from vcard_importer.value_cache import ValueCache

__all__ = [
    "ContactRecord",
    "Decoder",
    "InMemoryRepository",
    "Repository",
    "ValueCache",
    "decode",
]
