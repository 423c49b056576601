"""Sentence-based chunking with neighbor overlap.

Every sentence becomes one chunk made of the previous sentence, the sentence
itself and the next sentence, concatenated without a separator.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Tuple

from nltk.tokenize.punkt import PunktTokenizer

from ragfs import config
from ragfs.errors import ChunkingError


class SpanTokenizer(Protocol):
    """Anything that yields (start, end) sentence spans, e.g. NLTK Punkt."""

    def span_tokenize(self, text: str) -> Iterable[Tuple[int, int]]:
        ...


@dataclass(frozen=True)
class Sentence:
    """A sentence with its position in the source document."""

    index: int
    text: str
    char_start: int
    char_end: int


def load_punkt_tokenizer(language: str = None) -> SpanTokenizer:
    """Load the pretrained NLTK Punkt tokenizer for a language.

    Raises:
        ChunkingError: If the Punkt model is not installed
    """
    language = language or config.SENTENCE_LANGUAGE
    try:
        return PunktTokenizer(language)
    except LookupError as e:
        raise ChunkingError(
            f"Sentence tokenizer for '{language}' unavailable "
            f"(run: python -m nltk.downloader punkt_tab): {e}"
        ) from e


class SentenceChunker:
    """Splits text into sentences and builds one overlapping window per sentence."""

    def __init__(self, tokenizer: Optional[SpanTokenizer] = None, language: str = None):
        """Initialize the chunker.

        Args:
            tokenizer: Sentence tokenizer exposing span_tokenize (default: Punkt)
            language: Punkt model language when no tokenizer is given

        Raises:
            ChunkingError: If the default tokenizer cannot be loaded
        """
        self.tokenizer = tokenizer or load_punkt_tokenizer(language)

    def split_sentences(self, text: str) -> List[Sentence]:
        """Split text into sentences.

        A sentence runs up to the start of the next one, so whitespace between
        sentences stays attached to the preceding sentence.
        """
        if not text:
            return []

        spans = list(self.tokenizer.span_tokenize(text))
        sentences = []
        for i, (start, end) in enumerate(spans):
            if i + 1 < len(spans):
                end = spans[i + 1][0]
            sentences.append(
                Sentence(index=i, text=text[start:end], char_start=start, char_end=end)
            )
        return sentences

    def chunk(self, text: str) -> List[str]:
        """Build one chunk per sentence from the sentence and its neighbors."""
        sentences = self.split_sentences(text)
        chunks = []
        for i, sentence in enumerate(sentences):
            parts = []
            if i - 1 >= 0:
                parts.append(sentences[i - 1].text)
            parts.append(sentence.text)
            if i + 1 < len(sentences):
                parts.append(sentences[i + 1].text)
            chunks.append("".join(parts))
        return chunks

