"""REST client for the external virtual try-on inference server.

The client never raises for transport problems: every failure is folded into
a :class:`TryOnResponse` with ``success=False`` and a human readable error.
Timeouts are reported separately from other network errors.
"""

from __future__ import annotations

import base64
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import requests
from pydantic import BaseModel, ValidationError

from stylisto_app.config import DEFAULT_TRYON_TIMEOUT_SECONDS, DEFAULT_TRYON_URL
from stylisto_app.logging_config import get_logger, log_event
from tools.observability import instrument_call

LOGGER = get_logger(__name__)

TRYON_PATH = "/api/virtual-tryon"
HEALTH_PATH = "/health"
TIMEOUT_ERROR = "Request timeout - try-on server took too long to respond"
MOCK_PROCESSING_TIME_MS = 2000


@dataclass
class TryOnRequest:
    user_image: str
    clothing_images: List[str]
    prompt: str = ""
    mode: str = "multiple"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "user_image": self.user_image,
            "clothing_images": list(self.clothing_images),
            "prompt": self.prompt or "",
            "mode": self.mode or "multiple",
        }


@dataclass
class TryOnResponse:
    success: bool
    result_image: Optional[str] = None
    error: Optional[str] = None
    processing_time: Optional[float] = None
    debug_info: Dict[str, Any] = field(default_factory=dict)


class _TryOnPayload(BaseModel):
    success: bool = False
    result_image: Optional[str] = None
    error: Optional[str] = None
    processing_time: Optional[float] = None
    debug_info: Optional[Dict[str, Any]] = None


class _HealthPayload(BaseModel):
    status: str = "unknown"


class VirtualTryOnClient:
    """Talks to the try-on server over JSON/HTTP.

    ``timeout_seconds`` is a wall-clock limit for a whole try-on request.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_TRYON_URL,
        timeout_seconds: float = DEFAULT_TRYON_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def process_virtual_tryon(self, request: TryOnRequest) -> TryOnResponse:
        log_event(
            LOGGER,
            logging.INFO,
            "tryon_request_started",
            clothing_count=len(request.clothing_images),
            mode=request.mode,
        )
        try:
            response = self._post_within_deadline(f"{self.base_url}{TRYON_PATH}", request.to_payload())
        except requests.Timeout:
            log_event(LOGGER, logging.WARNING, "tryon_request_timeout", timeout_seconds=self.timeout_seconds)
            return TryOnResponse(success=False, error=TIMEOUT_ERROR)
        except requests.RequestException as exc:
            log_event(LOGGER, logging.ERROR, "tryon_request_failed", error=str(exc))
            return TryOnResponse(success=False, error=f"Network error: {exc}")

        if not response.ok:
            log_event(LOGGER, logging.ERROR, "tryon_server_error", status_code=response.status_code)
            return TryOnResponse(success=False, error=f"Flask API error: {response.status_code} {response.text}")

        try:
            payload = _TryOnPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            log_event(LOGGER, logging.ERROR, "tryon_payload_invalid", error=str(exc))
            return TryOnResponse(success=False, error="Unknown error occurred")

        log_event(
            LOGGER,
            logging.INFO,
            "tryon_request_completed",
            success=payload.success,
            has_result_image=bool(payload.result_image),
            processing_time=payload.processing_time,
        )
        return TryOnResponse(
            success=payload.success,
            result_image=payload.result_image,
            error=payload.error,
            processing_time=payload.processing_time,
            debug_info=payload.debug_info or {},
        )

    def _post_within_deadline(self, url: str, payload: Dict[str, Any]) -> requests.Response:
        """POST ``payload`` and read the whole body within ``timeout_seconds``.

        The ``timeout`` handed to requests bounds each socket read only, so a
        server trickling bytes would otherwise hold the call open indefinitely.
        Raises :class:`requests.Timeout` once the deadline passes.
        """

        opened: List[requests.Response] = []

        def send() -> requests.Response:
            response = self.session.post(
                url,
                json=payload,
                headers={"Accept": "application/json"},
                timeout=self.timeout_seconds,
                stream=True,
            )
            opened.append(response)
            _ = response.content
            return response

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tryon-request")
        future = executor.submit(send)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeout as exc:
            for response in opened:
                response.close()
            raise requests.Timeout(f"No complete response within {self.timeout_seconds}s") from exc
        finally:
            executor.shutdown(wait=False)

    @instrument_call("tryon_health_check")
    def check_health(self) -> bool:
        try:
            response = self.session.get(
                f"{self.base_url}{HEALTH_PATH}",
                headers={"Accept": "application/json"},
                timeout=self.timeout_seconds,
            )
            if not response.ok:
                return False
            return _HealthPayload.model_validate(response.json()).status == "healthy"
        except (requests.RequestException, ValueError, ValidationError) as exc:
            LOGGER.warning("Try-on server not reachable: %s", exc)
            return False

    def _fetch_as_base64(self, url: str) -> str:
        response = self.session.get(url, timeout=self.timeout_seconds)
        response.raise_for_status()
        return base64.b64encode(response.content).decode("ascii")

    def prepare_images(self, image_urls: Sequence[str]) -> List[str]:
        """Turn image references into bare base64 strings, skipping what cannot be read."""

        prepared: List[str] = []
        for url in image_urls:
            if not url:
                continue
            if url.startswith("data:"):
                _, _, encoded = url.partition(",")
                if encoded:
                    prepared.append(encoded)
                else:
                    LOGGER.warning("Skipping data URI without payload")
                continue
            if url.startswith(("http://", "https://")):
                try:
                    prepared.append(self._fetch_as_base64(url))
                except requests.RequestException as exc:
                    LOGGER.warning("Skipping image that could not be fetched: %s", exc)
                continue
            LOGGER.warning("Skipping unsupported image URL scheme: %s", url[:20])
        return prepared

    def create_mock_response(self, request: TryOnRequest) -> TryOnResponse:
        """Placeholder result for development when no try-on server is running."""

        item_count = len(request.clothing_images)
        mode = request.mode or "multiple"
        svg = (
            '<svg width="1024" height="1024" xmlns="http://www.w3.org/2000/svg">'
            '<rect width="100%" height="100%" fill="#E5E7EB"/>'
            '<text x="50%" y="30%" text-anchor="middle" font-family="Arial" font-size="48" fill="#4B5563">'
            "Mock Result</text>"
            '<text x="50%" y="40%" text-anchor="middle" font-family="Arial" font-size="32" fill="#6B7280">'
            "Virtual Try-On</text>"
            '<text x="50%" y="50%" text-anchor="middle" font-family="Arial" font-size="24" fill="#6B7280">'
            f"{item_count} items processed</text>"
            '<text x="50%" y="60%" text-anchor="middle" font-family="Arial" font-size="20" fill="#9CA3AF">'
            f"Mode: {mode}</text>"
            "</svg>"
        )
        encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
        return TryOnResponse(
            success=True,
            result_image=f"data:image/svg+xml;base64,{encoded}",
            processing_time=MOCK_PROCESSING_TIME_MS,
            debug_info={
                "received_images": item_count + 1,
                "processed_images": item_count,
                "model_used": "mock",
            },
        )


__all__ = ["TryOnRequest", "TryOnResponse", "VirtualTryOnClient", "TIMEOUT_ERROR"]
