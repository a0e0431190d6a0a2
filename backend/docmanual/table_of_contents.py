from __future__ import annotations
import json
from typing import Optional

from .errors import ValidationError
from .gemini_client import GeminiClient

# Keep prompts bounded
MAX_CONTENT_CHARS = 60000


def build_toc_prompt(content: str) -> str:
	return (
		"You are an expert technical writer. Generate a table of contents for the following module documentation. "
		"Summarize sections with missing headers.\n\n"
		f"Documentation Content: {content}"
	)


def _unwrap(text: str) -> str:
	# Models sometimes answer with {"tableOfContents": "..."}
	stripped = text.strip()
	if stripped.startswith("```"):
		stripped = stripped.strip("`").strip()
		if stripped.lower().startswith("json"):
			stripped = stripped[4:].strip()
	try:
		data = json.loads(stripped)
	except ValueError:
		return text.strip()
	if isinstance(data, dict) and isinstance(data.get("tableOfContents"), str):
		return data["tableOfContents"].strip()
	return text.strip()


async def generate_table_of_contents(content: str, client: Optional[GeminiClient] = None) -> str:
	content = (content or "").strip()
	if not content:
		raise ValidationError("Documentation content is required")
	if len(content) > MAX_CONTENT_CHARS:
		content = content[:MAX_CONTENT_CHARS]
	owned = client is None
	client = client or GeminiClient()
	try:
		return _unwrap(await client.generate(build_toc_prompt(content)))
	finally:
		if owned:
			await client.aclose()
