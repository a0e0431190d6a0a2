"""
Tests for the table-of-contents generator and its Gemini client.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from docmanual.errors import ValidationError
from docmanual.gemini_client import GeminiClient, GeminiNotConfigured
from docmanual.table_of_contents import build_toc_prompt, generate_table_of_contents


def _gemini_answer(text: str) -> dict:
	return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_prompt_carries_content() -> None:
	prompt = build_toc_prompt("<h3>Overview</h3>")
	assert "table of contents" in prompt
	assert "Summarize sections with missing headers." in prompt
	assert prompt.endswith("Documentation Content: <h3>Overview</h3>")


def test_generate_posts_prompt_and_returns_text() -> None:
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["key"] = request.url.params.get("key")
		seen["body"] = json.loads(request.content)
		return httpx.Response(200, json=_gemini_answer("1. Overview\n2. Key Features"))

	client = GeminiClient(api_key="test-key", transport=httpx.MockTransport(handler))
	try:
		toc = asyncio.run(generate_table_of_contents("<h3>Overview</h3><p>text</p>", client=client))
	finally:
		asyncio.run(client.aclose())
	assert toc == "1. Overview\n2. Key Features"
	assert seen["key"] == "test-key"
	assert "<h3>Overview</h3>" in seen["body"]["contents"][0]["parts"][0]["text"]


def test_json_answers_are_unwrapped() -> None:
	answer = json.dumps({"tableOfContents": "- Overview"})

	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(200, json=_gemini_answer(answer))

	client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler))
	try:
		assert asyncio.run(generate_table_of_contents("body", client=client)) == "- Overview"
	finally:
		asyncio.run(client.aclose())


def test_upstream_error_raises_runtime_error() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		return httpx.Response(500, json={"error": "boom"})

	client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler))
	try:
		with pytest.raises(RuntimeError):
			asyncio.run(generate_table_of_contents("body", client=client))
	finally:
		asyncio.run(client.aclose())


def test_empty_content_is_rejected() -> None:
	with pytest.raises(ValidationError):
		asyncio.run(generate_table_of_contents("   "))


def test_missing_key_is_reported() -> None:
	with pytest.raises(GeminiNotConfigured):
		GeminiClient()
