"""Transaction categorisation through the OpenAI Responses API.

Public API:
    - :func:`categorise`: send one anonymised batch, return category results.
    - :func:`apply_categories`: align results back onto the batch.

The service may answer for only a subset of the batch and in any order.
Results with an unknown index, a repeated index or a category outside the
allowed list are dropped (logged at warning). No side effects occur at import
time (no client creation, no environment reads).
"""

from __future__ import annotations

import json
import os
import random
import time
from collections.abc import Mapping, Sequence
from typing import Any

from openai import OpenAI
from openai.types.responses import ResponseTextConfigParam
from pydantic import ValidationError

from . import prompting
from .categories import load_categories
from .logging_setup import get_logger
from .models import CategorizedTransaction, ClassifierResult, Transaction

# ---- Tunables (private) ------------------------------------------------------

_MAX_ATTEMPTS: int = 3
_BACKOFF_SCHEDULE_SEC: tuple[float, ...] = (0.5, 2.0)
_JITTER_PCT: float = 0.20
_DEFAULT_MODEL: str = "gpt-5-mini"

_logger = get_logger("lunchprep.categorize")


class CategorisationError(RuntimeError):
    """The categorisation service failed after exhausting retries."""


# ---- Internal helpers --------------------------------------------------------


def _model_name() -> str:
    return os.getenv("LUNCHPREP_MODEL", "").strip() or _DEFAULT_MODEL


def _create_client() -> OpenAI:
    return OpenAI()


def _extract_response_json_mapping(resp: Any) -> Mapping[str, Any]:
    """Decode the JSON mapping from an OpenAI Responses SDK result.

    Prefers ``resp.output_text``; falls back to ``resp.output[0].content[0].text``.
    Raises ``ValueError`` when no text is found or it is not valid JSON.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        output = getattr(resp, "output", None)
        content = getattr(output[0], "content", None) if output else None
        if content:
            txt_obj = getattr(content[0], "text", None)
            if isinstance(txt_obj, str):
                text = txt_obj
            else:
                # Some SDKs expose text as an object with a ``value`` string.
                maybe_val = getattr(txt_obj, "value", None)
                if isinstance(maybe_val, str):
                    text = maybe_val
    if not text or not isinstance(text, str):
        raise ValueError("Unexpected Responses API shape; unable to locate text output")

    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError("Model output was not valid JSON per the requested schema") from e
    if not isinstance(decoded, Mapping):
        raise ValueError("Invalid response: expected a JSON object at top level")
    return decoded


def _is_retryable(exc: BaseException) -> bool:
    """Return True only for HTTP 429 and 5xx errors."""

    sc = getattr(exc, "status_code", None)
    return isinstance(sc, int) and (sc == 429 or 500 <= sc < 600)


def _sleep_backoff(attempt_no: int) -> None:
    if attempt_no - 1 < len(_BACKOFF_SCHEDULE_SEC):
        base = _BACKOFF_SCHEDULE_SEC[attempt_no - 1]
    else:
        base = _BACKOFF_SCHEDULE_SEC[-1]
    jitter = base * _JITTER_PCT
    time.sleep(max(0.0, base + random.uniform(-jitter, jitter)))


def parse_results(
    body: Mapping[str, Any], *, num_items: int, allowed_categories: Sequence[str]
) -> list[ClassifierResult]:
    """Validate the decoded ``{"results": [...]}`` body.

    Raises ``ValueError`` when ``results`` is missing or not a list. Individual
    bad entries are dropped rather than failing the batch.
    """

    results = body.get("results")
    if not isinstance(results, list):
        raise ValueError("Invalid response: missing or non-list 'results'")

    allowed = set(allowed_categories)
    seen: set[int] = set()
    out: list[ClassifierResult] = []
    for raw in results:
        try:
            item = ClassifierResult.model_validate(raw)
        except ValidationError:
            _logger.warning("categorise:drop reason=invalid_item")
            continue
        if item.index >= num_items:
            _logger.warning("categorise:drop reason=index_out_of_range index=%d", item.index)
            continue
        if item.index in seen:
            _logger.warning("categorise:drop reason=duplicate_index index=%d", item.index)
            continue
        if item.category not in allowed:
            _logger.warning(
                "categorise:drop reason=unknown_category index=%d category=%r",
                item.index,
                item.category,
            )
            continue
        seen.add(item.index)
        out.append(item)
    return out


# ---- Public API --------------------------------------------------------------


def categorise(
    transactions: Sequence[Transaction],
    categories: Sequence[str] | None = None,
    *,
    client: Any | None = None,
) -> list[ClassifierResult]:
    """Assign a category to each transaction of an already-anonymised batch.

    Parameters
    ----------
    transactions:
        The masked batch. Only ``description``, ``notes`` and
        ``transaction_code`` are sent.
    categories:
        Allowed category names; defaults to :func:`load_categories`.
    client:
        An ``openai.OpenAI``-shaped client. Created on demand when omitted.

    Retries HTTP 429/5xx up to three attempts. Malformed output raises
    ``ValueError``; any other terminal failure raises
    :class:`CategorisationError`.
    """

    if not transactions:
        return []

    allowed = tuple(categories) if categories is not None else load_categories()
    text_cfg: ResponseTextConfigParam = {"format": prompting.build_response_format(allowed)}
    user_content = prompting.build_prompt(transactions, allowed)
    model = _model_name()
    count = len(transactions)

    _logger.info("categorise:request model=%s num_transactions=%d", model, count)
    client = client if client is not None else _create_client()
    attempt = 1
    while True:
        t0 = time.perf_counter()
        try:
            resp = client.responses.create(
                model=model,
                instructions=prompting.SYSTEM_INSTRUCTION,
                input=user_content,
                text=text_cfg,
            )
            decoded = _extract_response_json_mapping(resp)
            results = parse_results(decoded, num_items=count, allowed_categories=allowed)
            _logger.info(
                "categorise:done num_transactions=%d num_results=%d latency_ms=%.2f",
                count,
                len(results),
                (time.perf_counter() - t0) * 1000.0,
            )
            return results
        except ValueError:
            # Parsing/validation failures are terminal (no retries)
            raise
        except Exception as e:  # noqa: BLE001 - SDK raises many error types
            dt_ms = (time.perf_counter() - t0) * 1000.0
            if attempt >= _MAX_ATTEMPTS or not _is_retryable(e):
                _logger.error(
                    "categorise:failed_terminal num_transactions=%d latency_ms=%.2f error=%s",
                    count,
                    dt_ms,
                    e.__class__.__name__,
                )
                raise CategorisationError(f"categorisation failed: {e}") from e
            _logger.warning(
                "categorise:retry latency_ms=%.2f error=%s attempt=%d",
                dt_ms,
                e.__class__.__name__,
                attempt,
            )
            _sleep_backoff(attempt)
            attempt += 1


def apply_categories(
    transactions: Sequence[Transaction], results: Sequence[ClassifierResult]
) -> list[CategorizedTransaction]:
    """Pair each transaction with its result by position; missing ones get ``""``."""

    by_index = {r.index: r.category for r in results}
    return [
        CategorizedTransaction(transaction=tx, category=by_index.get(i, ""))
        for i, tx in enumerate(transactions)
    ]


__all__ = ["CategorisationError", "apply_categories", "categorise", "parse_results"]
