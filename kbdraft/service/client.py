from __future__ import annotations

import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Iterable, List

import requests

from ..models.article import FlaggedSection, QualityScore
from ..utils.config import resolve_required
from .errors import ServiceError, raise_for_status


def _retry_delay(retry_after: str | None, fallback: float) -> float:
    """Seconds to wait from a Retry-After header (delta-seconds or HTTP-date)."""
    if not retry_after:
        return fallback
    try:
        return max(0.0, float(retry_after))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(retry_after)
    except (TypeError, ValueError):
        return fallback
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


class KnowledgeServiceClient:
    """
    Client for the knowledge-base backend that scores article quality and
    scans Markdown for leaked secrets. Both calls are advisory: callers catch
    ServiceError / requests.RequestException and carry on.
    """

    def __init__(self, base_url: str, token: str | None = None, timeout: int = 15,
                 retries: int = 2, backoff: float = 0.5, verbose: bool = False):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self.verbose = verbose
        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    # ---------------- internal ----------------
    def _request(self, method: str, path: str, *, expected: Iterable[int] | None = None,
                 params: dict | None = None, json: dict | list | None = None) -> Any:
        url = f"{self.base_url}{path}" if path.startswith('/') else f"{self.base_url}/{path}"
        expected = set(expected or {200})
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = self.session.request(method, url, timeout=self.timeout, params=params, json=json)
            except requests.RequestException:
                if attempt <= self.retries:
                    time.sleep(self.backoff * (2 ** (attempt - 1)))
                    continue
                raise

            if resp.status_code in expected:
                try:
                    return resp.json()
                except ValueError:
                    raise ServiceError(f"{method} {url}: response is not JSON")

            if resp.status_code in (429, 500, 502, 503, 504) and attempt <= self.retries:
                retry_after = resp.headers.get("Retry-After")
                delay = _retry_delay(retry_after, self.backoff * (2 ** (attempt - 1)))
                if self.verbose:
                    print(f"retrying {method} {url} in {delay}s (status {resp.status_code})")
                time.sleep(delay)
                continue

            payload = {}
            try:
                payload = resp.json()
            except ValueError:
                pass
            if not isinstance(payload, dict):
                payload = {}
            raise_for_status(resp.status_code, message=f"{method} {url}", payload=payload)
            raise ServiceError(f"{method} {url}: unexpected status {resp.status_code}")

    # ---------------- collaborator calls ----------------
    def score_quality(self, article: Dict[str, Any]) -> QualityScore:
        """Score an article payload (see Article.to_payload)."""
        res = self._request("POST", "/api/quality/score", json={"article": article})
        return QualityScore.from_dict(res or {})

    def scan_sensitive_data(self, markdown: str) -> List[FlaggedSection]:
        """Return flagged lines; an empty list means nothing was found."""
        res = self._request("POST", "/api/sensitive/scan", json={"content": markdown})
        items = res.get("flags", []) if isinstance(res, dict) else res
        return [FlaggedSection.from_dict(item) for item in items or []]


def client_from_config(cfg: dict, service_url: str | None = None, token: str | None = None,
                       verbose: bool = False) -> KnowledgeServiceClient:
    base_url = resolve_required("service_url", service_url, cfg)
    return KnowledgeServiceClient(
        base_url=base_url,
        token=token or cfg.get("token") or None,
        timeout=int(cfg.get("timeout", 15)),
        retries=int(cfg.get("retries", 2)),
        verbose=verbose,
    )
