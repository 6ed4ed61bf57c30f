from __future__ import annotations

import json
import logging
import re
from typing import Callable, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

RE_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_-]*\s*")
RE_TRAILING_FENCE = re.compile(r"\s*```\s*$")


class ResponseParseError(ValueError):
    pass


def _raw(text: str) -> Optional[str]:
    return text


def _strip_code_fences(text: str) -> Optional[str]:
    stripped = RE_TRAILING_FENCE.sub("", RE_LEADING_FENCE.sub("", text))
    if stripped == text:
        return None
    return stripped


def _slice_braces(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


# Order matters: each strategy handles a progressively messier response.
REPAIR_STRATEGIES: List[Tuple[str, Callable[[str], Optional[str]]]] = [
    ("raw", _raw),
    ("strip_fences", _strip_code_fences),
    ("slice_braces", _slice_braces),
]


def parse_model_json(text: str, model_cls: Type[ModelT]) -> ModelT:
    """Parse a model response into ``model_cls`` using the repair strategies in order.

    A strategy succeeds only when its candidate both decodes as JSON and
    validates against the schema; the first success wins.
    """
    if not isinstance(text, str):
        raise ResponseParseError(f"Expected text response, got {type(text).__name__}")
    failures: List[str] = []
    for name, strategy in REPAIR_STRATEGIES:
        candidate = strategy(text)
        if candidate is None:
            failures.append(f"{name}: not applicable")
            continue
        try:
            parsed = model_cls.model_validate(json.loads(candidate))
        except json.JSONDecodeError as exc:
            failures.append(f"{name}: invalid JSON ({exc.msg})")
            continue
        except ValidationError as exc:
            failures.append(f"{name}: schema mismatch ({exc.error_count()} errors)")
            continue
        if name != "raw":
            LOGGER.debug("Parsed model response with %s strategy", name)
        return parsed
    raise ResponseParseError("Unparseable model response: " + "; ".join(failures))
