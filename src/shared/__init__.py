"""Cross-cutting helpers: errors, LLM calls, time."""
