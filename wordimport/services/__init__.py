"""Services for highlight import, enrichment and flashcard export."""

from wordimport.services.anki import AnkiService
from wordimport.services.cache import WordCache
from wordimport.services.dictionary import OxfordDictionary
from wordimport.services.pipeline import EnrichmentPipeline
from wordimport.services.readwise import ReadwiseClient
from wordimport.services.translate import GoogleTranslator

__all__ = [
    "AnkiService",
    "EnrichmentPipeline",
    "GoogleTranslator",
    "OxfordDictionary",
    "ReadwiseClient",
    "WordCache",
]
