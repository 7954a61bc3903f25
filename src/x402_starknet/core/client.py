"""
HTTP client for talking to a remote x402 facilitator.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from .payloads import build_payment_request
from .types import PaymentPayload, PaymentRequirements, SettleResult, VerifyResult

__all__ = ["FacilitatorClient"]


def _decode_json(response: requests.Response, url: str) -> Dict[str, Any]:
    if response.status_code >= 400:
        raise RuntimeError(
            f"Facilitator responded with {response.status_code}: {response.text}"
        )
    try:
        return response.json()
    except json.JSONDecodeError as exc:
        raise RuntimeError(
            f"Failed to parse JSON from facilitator at {url}: {response.text}"
        ) from exc


class FacilitatorClient:
    """
    Thin wrapper around the facilitator ``/verify``, ``/settle`` and
    ``/supported`` endpoints, for use by resource servers.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{path}"
        logging.info("Submitting payment to %s", url)
        response = self.session.post(url, json=body, timeout=self.timeout)
        return _decode_json(response, url)

    def supported(self) -> Dict[str, Any]:
        url = f"{self.base_url}/supported"
        response = self.session.get(url, timeout=self.timeout)
        return _decode_json(response, url)

    def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResult:
        body = build_payment_request(payload, requirements)
        return VerifyResult.from_response(self._post("verify", body))

    def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResult:
        body = build_payment_request(payload, requirements)
        return SettleResult.from_response(self._post("settle", body))
