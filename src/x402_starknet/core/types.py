"""
Value objects exchanged between resource servers, clients and the facilitator.

Every type maps to the camelCase JSON shape used on the wire through
``from_dict`` / ``to_dict``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

__all__ = [
    "PayloadError",
    "PaymentPayload",
    "PaymentRequirements",
    "SettleResult",
    "Signature",
    "VerifyResult",
    "X402_VERSION",
    "parse_int",
]

X402_VERSION = 1


class PayloadError(ValueError):
    """Raised when a wire payload or requirements object cannot be parsed."""


def parse_int(value: Any, field_name: str) -> int:
    """
    Parse an integer given as ``int``, decimal string or ``0x`` hex string.
    """
    if isinstance(value, bool):
        raise PayloadError(f"{field_name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            return int(text, 10)
        except ValueError as exc:
            raise PayloadError(
                f"{field_name} must be an integer, got {value!r}"
            ) from exc
    raise PayloadError(f"{field_name} must be an integer, got {value!r}")


def _require(data: Mapping[str, Any], key: str, owner: str) -> Any:
    if key not in data or data[key] is None:
        raise PayloadError(f"{owner} is missing '{key}'")
    return data[key]


def _require_str(data: Mapping[str, Any], key: str, owner: str) -> str:
    value = _require(data, key, owner)
    if not isinstance(value, str):
        raise PayloadError(f"{owner}.{key} must be a string")
    return value


@dataclass(frozen=True)
class Signature:
    r: int
    s: int

    @classmethod
    def from_wire(cls, value: Any) -> "Signature":
        if isinstance(value, Mapping):
            return cls(
                r=parse_int(_require(value, "r", "signature"), "signature.r"),
                s=parse_int(_require(value, "s", "signature"), "signature.s"),
            )
        if isinstance(value, Sequence) and not isinstance(value, str):
            if len(value) != 2:
                raise PayloadError("signature must contain exactly two elements")
            return cls(
                r=parse_int(value[0], "signature.r"),
                s=parse_int(value[1], "signature.s"),
            )
        raise PayloadError("signature must be an object with 'r' and 's'")

    def as_list(self) -> list[int]:
        return [self.r, self.s]

    def to_dict(self) -> Dict[str, str]:
        return {"r": hex(self.r), "s": hex(self.s)}


@dataclass(frozen=True)
class PaymentPayload:
    """
    The signed authorization a payer attaches to a paid request.

    ``from_`` carries the wire field ``from``, which is a Python keyword.
    """

    from_: str
    to: str
    token: str
    amount: int
    nonce: int
    deadline: int
    signature: Signature

    @property
    def payer(self) -> str:
        return self.from_

    def message(self) -> Dict[str, Any]:
        """Return the signed fields, in signing order."""
        return {
            "from": self.from_,
            "to": self.to,
            "token": self.token,
            "amount": self.amount,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PaymentPayload":
        if not isinstance(data, Mapping):
            raise PayloadError("paymentPayload must be an object")
        # x402 envelopes nest the scheme payload under "payload".
        inner = data.get("payload")
        if isinstance(inner, Mapping) and "from" not in data:
            data = inner
        return cls(
            from_=_require_str(data, "from", "paymentPayload"),
            to=_require_str(data, "to", "paymentPayload"),
            token=_require_str(data, "token", "paymentPayload"),
            amount=parse_int(_require(data, "amount", "paymentPayload"), "amount"),
            nonce=parse_int(_require(data, "nonce", "paymentPayload"), "nonce"),
            deadline=parse_int(
                _require(data, "deadline", "paymentPayload"), "deadline"
            ),
            signature=Signature.from_wire(
                _require(data, "signature", "paymentPayload")
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_,
            "to": self.to,
            "token": self.token,
            "amount": str(self.amount),
            "nonce": str(self.nonce),
            "deadline": self.deadline,
            "signature": self.signature.to_dict(),
        }


@dataclass(frozen=True)
class PaymentRequirements:
    pay_to: str
    asset: str
    max_amount_required: int
    max_timeout_seconds: int
    network: str
    scheme: str = "exact"
    resource: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = None
    extra: Optional[Dict[str, Any]] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PaymentRequirements":
        if not isinstance(data, Mapping):
            raise PayloadError("paymentRequirements must be an object")
        extra = data.get("extra")
        return cls(
            pay_to=_require_str(data, "payTo", "paymentRequirements"),
            asset=_require_str(data, "asset", "paymentRequirements"),
            max_amount_required=parse_int(
                _require(data, "maxAmountRequired", "paymentRequirements"),
                "maxAmountRequired",
            ),
            max_timeout_seconds=parse_int(
                _require(data, "maxTimeoutSeconds", "paymentRequirements"),
                "maxTimeoutSeconds",
            ),
            network=_require_str(data, "network", "paymentRequirements"),
            scheme=data.get("scheme") or "exact",
            resource=data.get("resource"),
            description=data.get("description"),
            mime_type=data.get("mimeType"),
            extra=dict(extra) if isinstance(extra, Mapping) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scheme": self.scheme,
            "network": self.network,
            "maxAmountRequired": str(self.max_amount_required),
            "resource": self.resource,
            "description": self.description,
            "mimeType": self.mime_type,
            "payTo": self.pay_to,
            "maxTimeoutSeconds": self.max_timeout_seconds,
            "asset": self.asset,
            "extra": self.extra,
        }


@dataclass(frozen=True)
class VerifyResult:
    is_valid: bool
    invalid_reason: Optional[str] = None
    payer: Optional[str] = None

    @classmethod
    def valid(cls, payer: Optional[str] = None) -> "VerifyResult":
        return cls(is_valid=True, invalid_reason=None, payer=payer)

    @classmethod
    def invalid(cls, reason: str, payer: Optional[str] = None) -> "VerifyResult":
        return cls(is_valid=False, invalid_reason=reason, payer=payer)

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> "VerifyResult":
        return cls(
            is_valid=bool(payload.get("isValid")),
            invalid_reason=payload.get("invalidReason"),
            payer=payload.get("payer"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "invalidReason": self.invalid_reason,
            "payer": self.payer,
        }


@dataclass(frozen=True)
class SettleResult:
    success: bool
    network_id: str
    tx_hash: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def settled(cls, tx_hash: str, network_id: str) -> "SettleResult":
        return cls(success=True, network_id=network_id, tx_hash=tx_hash)

    @classmethod
    def failed(
        cls,
        error: str,
        network_id: str,
        tx_hash: Optional[str] = None,
    ) -> "SettleResult":
        return cls(success=False, network_id=network_id, tx_hash=tx_hash, error=error)

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> "SettleResult":
        return cls(
            success=bool(payload.get("success")),
            network_id=payload.get("networkId") or payload.get("network") or "",
            tx_hash=payload.get("txHash") or payload.get("transaction"),
            error=payload.get("error") or payload.get("errorReason"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "txHash": self.tx_hash,
            "networkId": self.network_id,
        }
