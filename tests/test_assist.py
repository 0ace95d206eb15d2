"""Tests for taman.assist — polishing and summaries with graceful failure."""

from unittest.mock import MagicMock, patch

from taman.assist import (
    POLISH_PROMPT,
    SUMMARY_PROMPT,
    AssistTask,
    assist,
    generate_summary,
    polish_text,
)
from taman.shared.llm import LLMError


class TestPolish:
    @patch("taman.assist.call_claude")
    def test_returns_model_output(self, mock_call: MagicMock):
        mock_call.return_value = "Teks yang lebih rapi."
        assert polish_text("teks asli") == "Teks yang lebih rapi."
        system, user = mock_call.call_args[0]
        assert system == POLISH_PROMPT
        assert user.endswith("teks asli")
        assert mock_call.call_args[1]["label"] == "polish"

    @patch("taman.assist.call_claude")
    def test_empty_output_keeps_input(self, mock_call: MagicMock):
        mock_call.return_value = ""
        assert polish_text("teks asli") == "teks asli"


class TestSummary:
    @patch("taman.assist.call_claude")
    def test_strips_quotes(self, mock_call: MagicMock):
        mock_call.return_value = ' "Ringkasan singkat." \n'
        assert generate_summary("isi") == "Ringkasan singkat."
        assert mock_call.call_args[0][0] == SUMMARY_PROMPT

    @patch("taman.assist.call_claude")
    def test_passes_model_and_timeout(self, mock_call: MagicMock):
        mock_call.return_value = "ok"
        generate_summary("isi", model="sonnet", timeout=10)
        assert mock_call.call_args[1]["model"] == "sonnet"
        assert mock_call.call_args[1]["timeout"] == 10


class TestAssist:
    @patch("taman.assist.call_claude")
    def test_success(self, mock_call: MagicMock):
        mock_call.return_value = "Lebih baik."
        result = assist(AssistTask.POLISH, "kurang baik")
        assert result.ok is True
        assert result.text == "Lebih baik."
        assert result.message == "Teks berhasil dipoles."

    @patch("taman.assist.call_claude")
    def test_failure_returns_original_text(self, mock_call: MagicMock):
        mock_call.side_effect = LLMError("down")
        result = assist(AssistTask.POLISH, "teks asli")
        assert result.ok is False
        assert result.text == "teks asli"
        assert result.message == "AI sedang istirahat. Coba lagi nanti."

    @patch("taman.assist.call_claude")
    def test_summary_failure_message(self, mock_call: MagicMock):
        mock_call.side_effect = LLMError("down")
        result = assist(AssistTask.SUMMARIZE, "isi")
        assert result.ok is False
        assert result.message == "Gagal membuat ringkasan."
