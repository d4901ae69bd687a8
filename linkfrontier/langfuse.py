"""Optional Langfuse forwarding for crawl frontier events."""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class LangfuseClient:
    """Posts each frontier event as a span on the crawl's trace."""

    def __init__(
        self,
        base_url: str,
        public_key: str,
        secret_key: str,
        *,
        environment: str = "development",
        timeout_seconds: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.public_key = public_key
        self.secret_key = secret_key
        self.environment = environment
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls) -> Optional[LangfuseClient]:
        """Build a client from ``LANGFUSE_*`` variables; ``None`` when unset."""

        secret = os.getenv("LANGFUSE_SECRET_KEY")
        public = os.getenv("LANGFUSE_PUBLIC_KEY")
        if not secret or not public:
            return None
        return cls(
            os.getenv("LANGFUSE_BASE_URL", "https://cloud.langfuse.com"),
            public,
            secret,
            environment=os.getenv("LANGFUSE_ENVIRONMENT", "development"),
            timeout_seconds=float(os.getenv("LANGFUSE_TIMEOUT_SECONDS", "5")),
        )

    def build_span(self, event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "traceId": f"crawl-{payload.get('crawl_id') or 'default'}",
            "name": event,
            "timestamp": payload.get("timestamp") or datetime.now(timezone.utc).isoformat(),
            "environment": self.environment,
            "metadata": payload,
        }

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "X-Langfuse-Public-Key": self.public_key,
        }
        try:
            response = self.session.post(
                f"{self.base_url}/api/public/ingest",
                json=self.build_span(event, payload),
                headers=headers,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Langfuse span for %s not delivered: %s", event, exc)


__all__ = ["LangfuseClient"]
