"""Dictionary resolution of highlighted words into categorized definitions."""

from wordimport.services.dictionary.base import (
    CompositeError,
    DictionaryBackend,
    LeadCycle,
    NoDefinitions,
    NoEntries,
    NoLeads,
    NoStem,
    ResolutionError,
    ResolvedWord,
    UnknownCategory,
)
from wordimport.services.dictionary.oxford import OxfordDictionary

__all__ = [
    "CompositeError",
    "DictionaryBackend",
    "LeadCycle",
    "NoDefinitions",
    "NoEntries",
    "NoLeads",
    "NoStem",
    "OxfordDictionary",
    "ResolutionError",
    "ResolvedWord",
    "UnknownCategory",
]
