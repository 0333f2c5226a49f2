"""Extraction of JSON values embedded in free-form model output."""

import json
import logging

_logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


def extract_json(text: str | None) -> object | None:
    """Return the first JSON object or array found in ``text``.

    The value starts at the first ``{`` or ``[`` and is decoded once; the
    decoder stops at the matching close, so nested structures and braces
    inside strings are handled and trailing prose is ignored. Returns None
    when nothing parses.
    """
    if not text:
        return None
    start = _first_opener(text)
    if start is None:
        return None
    try:
        value, _ = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        _logger.debug("Could not parse model output as JSON: %s", exc)
        return None
    return value


def _first_opener(text: str) -> int | None:
    positions = [pos for pos in (text.find("{"), text.find("[")) if pos != -1]
    return min(positions) if positions else None
