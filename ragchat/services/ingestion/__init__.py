"""Document ingestion pipeline.

1. **Extract** (ITextExtractor) -- binary uploads become page texts.
2. **Chunk** (chunker.py / TextChunker) -- pages become overlapping
   1000-character windows that prefer paragraph and sentence boundaries.
3. **Embed** (IEmbeddingProvider) -- every window is embedded before any
   write happens.
4. **Store** (IVectorStoreProvider) -- one atomic append per document.
5. **Register** (DocumentRegistry) -- one immutable record per upload.

IngestionService provides the entry points (ingest_document, ingest_text,
ingest_file, ingest_base64).
"""

from ragchat.services.ingestion.chunker import TextChunker
from ragchat.services.ingestion.ingestion_service import IngestionService

__all__ = ["IngestionService", "TextChunker"]
