from __future__ import annotations  # Chat-completion gateway shared by the interview oracles

import json
import logging
import os
import re
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)

Message = Dict[str, str]

_ROUTE_LOCKS: Dict[str, threading.Lock] = {}
_ROUTE_LOCKS_GUARD = threading.Lock()

_FENCED = re.compile(r"^```[^\n]*\n(.*?)(?:\n?```)?\s*$", re.DOTALL)


class HttpClient(Protocol):  # Anything with an httpx-style post(); body is json= or data=/files=
    def post(self, url: str, *, headers: Dict[str, str], timeout: float, **body: Any) -> "HttpResponse": ...


class HttpResponse(Protocol):
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Transport, status or validation failure talking to a route
    pass


T = TypeVar("T", bound=BaseModel)


def _lock_for(route: LlmRoute) -> threading.Lock:
    key = route.name or route.base_url + route.endpoint
    with _ROUTE_LOCKS_GUARD:
        return _ROUTE_LOCKS.setdefault(key, threading.Lock())


def _one_at_a_time(route: LlmRoute, fn: Callable[[], Any]) -> Any:  # Routes flagged sequential never overlap
    if not route.sequential:
        return fn()
    with _lock_for(route):
        return fn()


def chat(
    messages: Sequence[Message],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:
    """Ask ``cfg`` for a reply and validate it against ``schema``.

    Invalid replies are retried ``cfg.max_retries`` times with the validation
    error fed back to the model; transport failures are not retried.
    """

    def _run() -> T:
        conversation = _normalize_messages(messages)
        if cfg.enforce_json:
            conversation.insert(0, {"role": "system", "content": _schema_instruction(schema)})
        attempts = cfg.max_retries + 1
        preview = _preview(conversation)
        problem: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            outgoing = list(conversation)
            if problem is not None:
                outgoing.append({"role": "system", "content": _retry_hint(str(problem), cfg.enforce_json)})
            logger.info(
                "LLM chat route=%s model=%s attempt=%d/%d preview=%s",
                cfg.name,
                cfg.model,
                attempt,
                attempts,
                preview,
            )
            content = _send(outgoing, cfg=cfg, client=client, options=options)
            try:
                return schema.model_validate_json(strip_code_fences(content))
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("LLM reply rejected route=%s attempt=%d: %s", cfg.name, attempt, exc)
                problem = exc
        raise LlmGatewayError(f"LLM output validation failed after {attempts} attempts") from problem

    return _one_at_a_time(cfg, _run)


def complete(
    messages: Sequence[Message],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> str:
    """Send ``messages`` once and return the reply text as-is.

    For callers that parse the reply themselves and own the fallback when it
    is malformed.
    """

    def _run() -> str:
        conversation = _normalize_messages(messages)
        logger.info("LLM complete route=%s model=%s preview=%s", cfg.name, cfg.model, _preview(conversation))
        content = _send(conversation, cfg=cfg, client=client, options=options)
        logger.info("LLM complete done route=%s chars=%d", cfg.name, len(content))
        return content

    return _one_at_a_time(cfg, _run)


def transcribe(
    audio: bytes,
    *,
    filename: str,
    content_type: str,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> str:
    """Upload ``audio`` to a speech-to-text route and return the recognised text.

    The route speaks the OpenAI ``audio/transcriptions`` form protocol and
    must answer with ``{"text": ...}``.
    """

    def _run() -> str:
        form: Dict[str, Any] = {"model": cfg.model, "response_format": "json", **(options or {})}
        files = {"file": (filename, audio, content_type)}
        logger.info("LLM transcribe route=%s model=%s bytes=%d", cfg.name, cfg.model, len(audio))
        body = _round_trip(cfg, client, _request_headers(cfg, json_body=False), data=form, files=files)
        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise LlmGatewayError("Transcription response missing text")
        return text

    return _one_at_a_time(cfg, _run)


def _schema_instruction(schema: Type[BaseModel]) -> str:
    return "Reply with a single JSON object matching this schema:\n" + json.dumps(schema.model_json_schema(), indent=2)


def _request_headers(cfg: LlmRoute, *, json_body: bool = True) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"} if json_body else {}
    api_key = os.getenv(cfg.api_key_env) if cfg.api_key_env else None
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _send(
    messages: List[Message],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient],
    options: Optional[Dict[str, Any]],
) -> str:  # One round trip; returns the first choice's message content
    payload: Dict[str, Any] = {"model": cfg.model, "messages": messages, **(options or {})}
    if cfg.response_format:
        payload["response_format"] = {"type": cfg.response_format}
    return _extract_content(_round_trip(cfg, client, _request_headers(cfg), json=payload))


def _round_trip(cfg: LlmRoute, client: Optional[HttpClient], headers: Dict[str, str], **body: Any) -> Any:
    """POST ``body`` to the route and return the decoded JSON reply."""

    try:
        response, release = _post(cfg.base_url + cfg.endpoint, headers, cfg.timeout_s, client, **body)
    except Exception as exc:  # noqa: BLE001
        logger.error("LLM transport failure route=%s: %s", cfg.name, exc)
        raise LlmGatewayError(f"LLM transport failed: {exc}") from exc
    try:
        if response.status_code >= 400:
            logger.error("LLM route=%s answered status %s", cfg.name, response.status_code)
            raise LlmGatewayError(f"LLM returned status {response.status_code}")
        try:
            return response.json()
        except Exception as exc:  # noqa: BLE001
            logger.error("LLM route=%s sent a non-JSON body: %s", cfg.name, exc)
            raise LlmGatewayError("LLM payload was not JSON") from exc
    finally:
        if release is not None:
            release()


def _post(
    url: str,
    headers: Dict[str, str],
    timeout: float,
    client: Optional[HttpClient],
    **body: Any,
) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Injected clients are owned by the caller
    if client is not None:
        return client.post(url, headers=headers, timeout=timeout, **body), None
    owned = httpx.Client(timeout=timeout)
    try:
        return owned.post(url, headers=headers, **body), owned.close
    except Exception:
        owned.close()
        raise


def _normalize_messages(messages: Sequence[Message]) -> List[Message]:
    normalized: List[Message] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _preview(messages: Sequence[Message], limit: int = 120) -> str:  # First non-empty line, for logs
    for message in messages:
        text = message["content"].strip()
        if text:
            first = text.splitlines()[0]
            return first if len(first) <= limit else first[: limit - 3] + "..."
    return ""


def _extract_content(body: Any) -> str:
    if not isinstance(body, dict):
        raise LlmGatewayError("LLM response missing content")
    choices = body.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        if isinstance(message, dict) and message.get("content", "") is None:
            # Refusals and tool-only replies carry no text; callers treat it as unparseable
            logger.warning("LLM reply had null content refusal=%s", message.get("refusal"))
            return ""
    if isinstance(body.get("content"), str):
        return body["content"]
    raise LlmGatewayError("LLM response missing content")


def strip_code_fences(content: str) -> str:
    """Return ``content`` without a surrounding markdown code fence."""

    text = content.strip()
    match = _FENCED.match(text)
    return match.group(1).strip() if match else text


def _retry_hint(error_text: str, enforce_json: bool) -> str:
    reason = error_text.splitlines()[0].strip() if error_text else ""
    if len(reason) > 200:
        reason = reason[:197] + "..."
    hint = "The previous reply failed validation."
    if reason:
        hint += f" Reason: {reason}."
    if enforce_json:
        return hint + " Return a single JSON object that matches the schema."
    return hint + " Follow the requested format precisely."
