"""Field dictionary loading and caching."""

from .loader import (
    EMPTY_DICTIONARY,
    FieldDictionaryCache,
    FieldDictionaryLoader,
    StaticFieldDictionaryLoader,
    XlsxFieldDictionaryLoader,
    build_field_dictionary,
    field_key,
)

__all__ = [
    "EMPTY_DICTIONARY",
    "FieldDictionaryCache",
    "FieldDictionaryLoader",
    "StaticFieldDictionaryLoader",
    "XlsxFieldDictionaryLoader",
    "build_field_dictionary",
    "field_key",
]
