"""Document loading and text chunking functionality."""

from pathlib import Path

import pypdf

from .config import config
from .models import Document, TextSegment

logger = config.get_logger(__name__)

TEXT_EXTENSIONS = {".txt", ".md", ".markdown"}


class DocumentLoader:
    """Handles loading of PDF and plain-text documents."""

    @staticmethod
    def load_pdf(file_path: Path) -> str:
        """Load text content from a PDF file.

        Returns:
            The extracted text of every page, joined with newlines.
        """
        try:
            with file_path.open("rb") as file:
                pdf_reader = pypdf.PdfReader(file)
                pages = [page.extract_text() or "" for page in pdf_reader.pages]
        except Exception:
            logger.exception("Error loading PDF %s", file_path)
            raise
        else:
            return "\n".join(pages)

    @staticmethod
    def load_txt(file_path: Path) -> str:
        """Load text content from a UTF-8 text file.

        Returns:
            The file content as a string.
        """
        try:
            with file_path.open(encoding="utf-8") as file:
                text = file.read()
        except Exception:
            logger.exception("Error loading text file %s", file_path)
            raise
        else:
            return text

    @classmethod
    def load_document(cls, file_path: Path) -> Document:
        """Load document based on file extension.

        Args:
            file_path: Path to the document file.

        Returns:
            The parsed Document, with the file name as its source.

        Raises:
            ValueError: If the file type is not supported.
        """
        file_ext = file_path.suffix.lower()
        if file_ext == ".pdf":
            text = cls.load_pdf(file_path)
        elif file_ext in TEXT_EXTENSIONS:
            text = cls.load_txt(file_path)
        else:
            msg = f"Unsupported file type: {file_ext}"
            raise ValueError(msg)
        return Document(text=text, metadata={"source": file_path.name})


class TextChunker:
    """Splits text into fixed-size character windows with overlap.

    Windows start every ``chunk_size - overlap`` characters until one starts at
    or past the end of the text, so a text of length L > chunk_size yields
    ``ceil(L / (chunk_size - overlap))`` segments and a shorter text yields one.
    """

    def __init__(
        self,
        chunk_size: int = 300,
        overlap: int = 30,
        *,
        respect_word_boundaries: bool = False,
    ) -> None:
        """Initialize the TextChunker with chunk size and overlap.

        Args:
            chunk_size: The maximum size of each text chunk.
            overlap: The number of overlapping characters between chunks.
            respect_word_boundaries: Pull a chunk's end back to the last space
                when that keeps it at least half full. Changes segment counts.

        Raises:
            ConfigurationError: If the size/overlap pair is invalid.
        """
        config.validate_split(chunk_size, overlap)
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.respect_word_boundaries = respect_word_boundaries

    def _window_end(self, text: str, start: int) -> int:
        end = start + self.chunk_size
        if not self.respect_word_boundaries or end >= len(text):
            return end
        last_space = text.rfind(" ", start, end)
        # At least half chunk size to prevent too small chunks after adjustment
        if last_space > start + self.chunk_size // 2:
            return last_space
        return end

    def chunk_text(self, text: str, source: str = "document") -> list[TextSegment]:
        """Split text into overlapping segments.

        Returns:
            Segments in document order; empty if the text is empty.
        """
        if not text:
            return []

        segments: list[TextSegment] = []
        if len(text) <= self.chunk_size:
            bounds = [(0, len(text))]
        else:
            bounds = []
            start = 0
            while start < len(text):
                end = self._window_end(text, start)
                bounds.append((start, min(end, len(text))))
                # Always advance, even if word-boundary adjustment shrank the window
                start = max(end - self.overlap, start + 1)

        for index, (start, end) in enumerate(bounds):
            segments.append(
                TextSegment(
                    text=text[start:end],
                    metadata={
                        "source": source,
                        "index": index,
                        "start_char": start,
                        "end_char": end,
                    },
                )
            )

        logger.info("Text split into %d segments", len(segments))
        return segments

    def split(self, document: Document) -> list[TextSegment]:
        """Split a loaded document, tagging each segment with its source.

        Returns:
            Segments in document order.
        """
        return self.chunk_text(document.text, source=document.source)
