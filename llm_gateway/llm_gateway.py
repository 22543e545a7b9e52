from __future__ import annotations  # Chat-completions gateway that returns decoded JSON replies

import json
import logging
import os
import re
import threading
from typing import Any, Callable, Dict, Optional, Protocol

import httpx

from config import LlmRoute


logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```[\w-]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)

_ROUTE_LOCKS: Dict[str, threading.Lock] = {}
_ROUTE_LOCKS_GUARD = threading.Lock()


class HttpClient(Protocol):  # What the gateway needs from an injected client
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Transport, status or payload failure
    pass


class LlmTimeoutError(LlmGatewayError):  # Route did not answer within timeout_s
    pass


def _lock_for(cfg: LlmRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _ROUTE_LOCKS_GUARD:
        return _ROUTE_LOCKS.setdefault(key, threading.Lock())


def _request(system: str, user: Any, cfg: LlmRoute, options: Optional[Dict[str, Any]]) -> tuple[Dict[str, Any], Dict[str, str]]:
    content = user if isinstance(user, str) else json.dumps(user, ensure_ascii=False)
    payload: Dict[str, Any] = {
        "model": cfg.model,
        "messages": [{"role": "system", "content": system}, {"role": "user", "content": content}],
        **(options or {}),
    }
    if cfg.response_format:
        payload["response_format"] = {"type": cfg.response_format}

    headers = {"Content-Type": "application/json"}
    api_key = os.getenv(cfg.api_key_env) if cfg.api_key_env else None
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return payload, headers


def _send(url: str, payload: Dict[str, Any], headers: Dict[str, str], cfg: LlmRoute, client: Optional[HttpClient]) -> Any:
    try:
        if client is not None:
            response = client.post(url, json=payload, headers=headers, timeout=cfg.timeout_s)
            return _body(response)
        with httpx.Client(timeout=cfg.timeout_s) as http_client:
            return _body(http_client.post(url, json=payload, headers=headers))
    except httpx.TimeoutException as exc:
        logger.error("LLM timeout route=%s after %.1fs", cfg.name, cfg.timeout_s)
        raise LlmTimeoutError(f"LLM timed out after {cfg.timeout_s}s") from exc
    except httpx.HTTPError as exc:
        logger.error("LLM transport failure route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM transport failed") from exc


def _body(response: HttpResponse) -> Any:
    if response.status_code >= 400:
        logger.error("LLM error status=%s body=%s", response.status_code, _preview(response.text))
        raise LlmGatewayError(f"LLM returned status {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        raise LlmGatewayError("LLM payload was not JSON") from exc


def _content(data: Any) -> str:  # choices[0].message.content, or a bare {"content": ...}
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                return message["content"]
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _unfenced(content: str) -> str:
    text = content.strip()
    match = _FENCE.match(text)
    return match.group(1).strip() if match else text


def invoke(
    system: str,
    user: Any,
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> Any:
    """Send one system/user exchange over ``cfg`` and return the decoded JSON reply.

    Raises ``LlmTimeoutError`` when the route exceeds ``timeout_s`` and
    ``LlmGatewayError`` for every other transport, status or decoding failure.
    Routes flagged ``sequential`` serve one request at a time.
    """

    payload, headers = _request(system, user, cfg, options)
    url = f"{cfg.base_url}{cfg.endpoint}"

    def _execute() -> Any:
        logger.info("LLM request route=%s model=%s preview=%s", cfg.name, cfg.model, _preview(system))
        text = _unfenced(_content(_send(url, payload, headers, cfg, client)))
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("LLM content was not JSON route=%s: %s", cfg.name, _preview(text))
            raise LlmGatewayError("LLM content was not JSON") from exc
        logger.info("LLM reply route=%s model=%s", cfg.name, cfg.model)
        return decoded

    if cfg.sequential:
        with _lock_for(cfg):
            return _execute()
    return _execute()


def invoker(cfg: LlmRoute, *, client: Optional[HttpClient] = None) -> Callable[[str, Any], Any]:  # Registry-ready callable bound to one route
    def _invoke(system: str, user: Any) -> Any:
        return invoke(system, user, cfg=cfg, client=client)

    return _invoke


def _preview(text: str) -> str:  # First non-empty line, shortened for logs
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line if len(line) <= 120 else line[:117] + "..."
    return ""
