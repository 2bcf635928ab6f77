"""Resource façades over the request pipeline."""

from .base import Resource
from .fields import FieldsResource
from .modules import ModulesResource
from .records import PageIterator, RecordsResource

__all__ = [
    "Resource",
    "FieldsResource",
    "ModulesResource",
    "PageIterator",
    "RecordsResource",
]
