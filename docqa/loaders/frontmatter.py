from __future__ import annotations

"""Front-matter parsing for Markdown/MDX documents."""

import json
import re

import yaml

from docqa.rag.types import ParsedDocument

_FRONT_MATTER_RE = re.compile(
    r"\A\ufeff?(= yaml =|---)[ \t]*\r?\n(.*?)^(?:\1|\.\.\.)[ \t]*\r?$\n?",
    re.DOTALL | re.MULTILINE,
)


class FrontMatterError(ValueError):
    """Raised when a front-matter block cannot be parsed."""
    pass


def parse_front_matter(text: str) -> ParsedDocument:
    """Split a document into front-matter metadata and body.

    A document without a leading ``---`` block has empty metadata and the
    whole text as its body.
    """
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return ParsedDocument(metadata={}, body=text)
    try:
        attributes = yaml.safe_load(match.group(2))
    except yaml.YAMLError as exc:
        raise FrontMatterError("Invalid YAML in front-matter") from exc
    if attributes is None:
        attributes = {}
    if not isinstance(attributes, dict):
        raise FrontMatterError("Front-matter must be a mapping")
    try:
        metadata = {str(key): _stringify(value) for key, value in attributes.items()}
    except (TypeError, ValueError) as exc:
        raise FrontMatterError("Front-matter values cannot be converted to text") from exc
    return ParsedDocument(metadata=metadata, body=text[match.end():])


def _stringify(value: object) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)
