from __future__ import annotations  # Chat-completions gateway for interview collaborators

import json
import logging
import os
import threading
from typing import Any, Dict, Optional, Protocol, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config.routes import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


_ROUTE_LOCKS: Dict[str, threading.Lock] = {}
_ROUTE_LOCKS_GUARD = threading.Lock()


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...


class LlmGatewayError(RuntimeError):  # Transport or status failure
    pass


class LlmValidationError(LlmGatewayError):  # Model output never matched the schema
    pass


T = TypeVar("T", bound=BaseModel)


def _lock_for(cfg: LlmRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _ROUTE_LOCKS_GUARD:
        lock = _ROUTE_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _ROUTE_LOCKS[key] = lock
    return lock


def chat(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:
    """Send ``messages`` to the configured route and parse the reply into ``schema``.

    Transport and HTTP status failures raise :class:`LlmGatewayError` at once;
    schema mismatches are retried ``cfg.max_retries`` times with a corrective
    system hint before :class:`LlmValidationError` is raised.
    """

    def _execute() -> T:
        base_messages: list[Dict[str, str]] = []
        if cfg.enforce_json:
            schema_json = json.dumps(schema.model_json_schema(), indent=2)
            base_messages.append(
                {"role": "system", "content": "Reply with a single JSON object matching this schema:\n" + schema_json}
            )
        base_messages.extend(_normalize_messages(messages))
        attempts = cfg.max_retries + 1
        last_error: Optional[Exception] = None
        for attempt in range(attempts):
            attempt_messages = list(base_messages)
            if last_error is not None:
                attempt_messages.append({"role": "system", "content": _retry_hint(str(last_error))})
            payload: Dict[str, Any] = {"model": cfg.model, "messages": attempt_messages}
            if options:
                payload.update(options)
            if cfg.response_format:
                payload["response_format"] = {"type": cfg.response_format}
            logger.info(
                "LLM request send route=%s model=%s attempt=%d/%d",
                cfg.name,
                cfg.model,
                attempt + 1,
                attempts,
            )
            data = _post(f"{cfg.base_url}{cfg.endpoint}", payload, _headers(cfg), cfg.timeout_s, client)
            content = _extract_content(data)
            try:
                parsed = schema.model_validate_json(_strip_code_fences(content))
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("LLM output validation failed route=%s: %s", cfg.name, exc)
                last_error = exc
                continue
            logger.info("LLM request done route=%s attempt=%d", cfg.name, attempt + 1)
            return parsed
        raise LlmValidationError("LLM output validation failed") from last_error

    if cfg.sequential:
        with _lock_for(cfg):
            return _execute()
    return _execute()


def _headers(cfg: LlmRoute) -> Dict[str, str]:  # Auth and custom headers for a route
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _post(
    url: str,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
    client: Optional[HttpClient],
) -> Any:  # Dispatch HTTP request and decode the JSON body
    try:
        if client is not None:
            response = client.post(url, json=payload, headers=headers, timeout=timeout)
        else:
            with httpx.Client(timeout=timeout) as http_client:
                response = http_client.post(url, json=payload, headers=headers)
    except Exception as exc:  # noqa: BLE001
        logger.error("LLM transport failure: %s", exc)
        raise LlmGatewayError("LLM transport failed") from exc
    if response.status_code >= 400:
        logger.error("LLM error status: %s", response.status_code)
        raise LlmGatewayError(f"LLM returned status {response.status_code}")
    try:
        return response.json()
    except Exception as exc:  # noqa: BLE001
        logger.error("Invalid JSON payload from LLM: %s", exc)
        raise LlmGatewayError("LLM payload was not JSON") from exc


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _extract_content(data: Any) -> str:  # Extract message content from an OpenAI-style body
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _strip_code_fences(content: str) -> str:  # Remove markdown fences the models like to add
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def _retry_hint(error_text: str) -> str:  # Corrective instruction appended on retry
    first_line = error_text.splitlines()[0].strip() if error_text else ""
    if len(first_line) > 200:
        first_line = first_line[:197] + "..."
    return f"The previous reply failed validation. Reason: {first_line}. Return a single JSON object that matches the schema."
