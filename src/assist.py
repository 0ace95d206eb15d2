"""Writing assistance: polishing prose and drafting excerpts with an LLM.

The model is an opaque collaborator: text in, text out, and it may
fail.  ``assist`` never raises; on failure it hands back the original
text untouched together with a message for the writer.
"""

from __future__ import annotations

import logging
from enum import StrEnum

from pydantic import BaseModel

from taman.shared.llm import LLMError, call_claude

logger = logging.getLogger(__name__)

POLISH_PROMPT = """\
Anda adalah editor ahli untuk blog pribadi.
Tolong poles teks berikut agar lebih ringkas, menarik, dan memiliki alur yang lebih baik,
sambil mempertahankan suara asli penulis.
KEMBALIKAN HANYA TEKS YANG SUDAH DIPOLES DALAM BAHASA INDONESIA, tanpa penjelasan tambahan."""

SUMMARY_PROMPT = """\
Buatlah ringkasan singkat (excerpt) 1-2 kalimat yang menarik untuk posting blog berikut
dalam BAHASA INDONESIA. Jangan gunakan tanda kutip."""


class AssistTask(StrEnum):
    POLISH = "polish"
    SUMMARIZE = "summarize"


class AssistResult(BaseModel):
    ok: bool
    text: str
    message: str


_MESSAGES = {
    AssistTask.POLISH: ("Teks berhasil dipoles.", "AI sedang istirahat. Coba lagi nanti."),
    AssistTask.SUMMARIZE: ("Ringkasan siap.", "Gagal membuat ringkasan."),
}


def polish_text(text: str, *, model: str | None = None, timeout: int = 120) -> str:
    """Return a polished version of ``text`` (the input itself if the model returns nothing).

    Raises:
        LLMError: If the model call fails.
    """
    result = call_claude(
        POLISH_PROMPT, f"Teks untuk dipoles:\n{text}", model=model, timeout=timeout, label="polish"
    )
    return result or text


def generate_summary(text: str, *, model: str | None = None, timeout: int = 120) -> str:
    """Return a one or two sentence excerpt for ``text``.

    Raises:
        LLMError: If the model call fails.
    """
    result = call_claude(
        SUMMARY_PROMPT, f"Konten posting:\n{text}", model=model, timeout=timeout, label="summary"
    )
    return result.strip().strip('"')


def assist(
    task: AssistTask, text: str, *, model: str | None = None, timeout: int = 120
) -> AssistResult:
    """Run ``task`` on ``text``, reporting failure instead of raising."""
    success, failure = _MESSAGES[task]
    try:
        if task == AssistTask.POLISH:
            output = polish_text(text, model=model, timeout=timeout)
        else:
            output = generate_summary(text, model=model, timeout=timeout)
    except LLMError as exc:
        logger.warning("Writing assist %s failed: %s", task, exc)
        return AssistResult(ok=False, text=text, message=failure)
    return AssistResult(ok=True, text=output, message=success)
