"""Document analysis capability, invoked by file ID.

The remote backend delegates to the content API's AI endpoints. The
in-memory analyzer is a deterministic stand-in that derives its answers
from the stored text, so tool behaviour can be tested end to end.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

from ..models.store import AIAnswer, AIExtraction
from .memory import InMemoryStore

EXCERPT_CHARS = 200

_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")
_WORD_RE = re.compile(r"\w+")
_FIELD_LINE_RE = re.compile(r"^\s*([^:\n]+?)\s*:\s*(.+?)\s*$", re.MULTILINE)


class DocumentAnalyzer(ABC):
    """Opaque text-generation and extraction over stored files."""

    @abstractmethod
    async def text_gen(
        self,
        file_id: str,
        prompt: str,
        dialogue_history: list[dict[str, Any]] | None = None,
    ) -> AIAnswer:
        """Free-form generation grounded on one file."""

    @abstractmethod
    async def ask(
        self,
        file_ids: list[str],
        prompt: str,
        mode: str = "single_item_qa",
        include_citations: bool = False,
        dialogue_history: list[dict[str, Any]] | None = None,
    ) -> AIAnswer:
        """Question answering over one or more files."""

    @abstractmethod
    async def extract(self, file_ids: list[str], prompt: str) -> AIAnswer:
        """Free-form extraction; the answer is a JSON string."""

    @abstractmethod
    async def extract_structured(
        self,
        file_ids: list[str],
        fields: list[dict[str, Any]] | None = None,
        metadata_template: dict[str, Any] | None = None,
    ) -> AIExtraction:
        """Extract named fields into a dict."""

    async def aclose(self) -> None:
        """Release backend resources. No-op by default."""


def _excerpt(text: str, limit: int = EXCERPT_CHARS) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= limit else flat[:limit].rstrip() + "..."


def _best_sentence(text: str, question: str) -> str:
    sentences = [s.strip() for s in _SENTENCE_RE.split(" ".join(text.split())) if s.strip()]
    if not sentences:
        return ""
    wanted = {w.casefold() for w in _WORD_RE.findall(question)}
    return max(
        sentences, key=lambda s: len(wanted & {w.casefold() for w in _WORD_RE.findall(s)})
    )


def _field_lines(text: str) -> dict[str, str]:
    return {k.strip().casefold(): v for k, v in _FIELD_LINE_RE.findall(text)}


class InMemoryAnalyzer(DocumentAnalyzer):
    """Deterministic analyzer over ``InMemoryStore`` content."""

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def _text(self, file_id: str) -> str:
        content = await self.store.get_file_content(file_id)
        return content.decode("utf-8", errors="replace")

    async def text_gen(
        self,
        file_id: str,
        prompt: str,
        dialogue_history: list[dict[str, Any]] | None = None,
    ) -> AIAnswer:
        text = await self._text(file_id)
        verb = prompt.split(maxsplit=1)[0].casefold() if prompt.strip() else ""
        if verb.startswith("summar"):
            return AIAnswer(answer=f"Summary: {_excerpt(text)}")
        if verb.startswith("classif"):
            words = len(_WORD_RE.findall(text))
            category = "short note" if words < 50 else "document"
            return AIAnswer(answer=f"Classification: {category} ({words} words)")
        if verb.startswith("translat"):
            match = re.search(r"\bto\s+([\w-]+)", prompt)
            language = match.group(1) if match else "en"
            return AIAnswer(answer=f"Translation ({language}): {_excerpt(text)}")
        return AIAnswer(answer=f"{prompt.strip()}\n{_excerpt(text)}")

    async def ask(
        self,
        file_ids: list[str],
        prompt: str,
        mode: str = "single_item_qa",
        include_citations: bool = False,
        dialogue_history: list[dict[str, Any]] | None = None,
    ) -> AIAnswer:
        best = ""
        citations: list[dict[str, Any]] = []
        for file_id in file_ids:
            sentence = _best_sentence(await self._text(file_id), prompt)
            if sentence and not best:
                best = sentence
            if sentence:
                citations.append({"type": "file", "id": file_id, "content": sentence})
        return AIAnswer(
            answer=f"Q: {prompt}\nA: {best or 'No answer found in the document.'}",
            citations=citations if include_citations else None,
        )

    async def extract(self, file_ids: list[str], prompt: str) -> AIAnswer:
        found: dict[str, str] = {}
        for file_id in file_ids:
            for key, value in _field_lines(await self._text(file_id)).items():
                found.setdefault(key, value)
        return AIAnswer(answer=json.dumps(found))

    async def extract_structured(
        self,
        file_ids: list[str],
        fields: list[dict[str, Any]] | None = None,
        metadata_template: dict[str, Any] | None = None,
    ) -> AIExtraction:
        lines: dict[str, str] = {}
        for file_id in file_ids:
            for key, value in _field_lines(await self._text(file_id)).items():
                lines.setdefault(key, value)
        if not fields:
            return AIExtraction(fields=lines)
        return AIExtraction(fields={f["key"]: lines.get(f["key"].casefold()) for f in fields})
