"""Normalise CLOB order responses into ``CreateOrderResult``.

Raw responses come back as dicts or attribute objects with several spellings
for the same field. They are decoded through one priority table:

- order id:      ``orderID``, then ``orderId``
- error message: ``errorMsg``, then ``error_msg``
- tx hashes:     ``transactionsHashes``, then ``transactionHashes``
- status:        ``status``
- success flag:  ``success``

A response is successful only if it signals acceptance (``success`` true or
an order id present) and carries no error message.
"""

from __future__ import annotations

from typing import Any, Optional

from src.trading.models import CreateOrderResult
from src.utils.parsing import _get_field, first_field

ERROR_CODES = (
    "INVALID_ORDER_MIN_TICK_SIZE",
    "INVALID_ORDER_MIN_SIZE",
    "INVALID_ORDER_DUPLICATED",
    "INVALID_ORDER_NOT_ENOUGH_BALANCE",
    "INVALID_ORDER_EXPIRATION",
    "INVALID_ORDER_ERROR",
    "EXECUTION_ERROR",
    "ORDER_DELAYED",
    "DELAYING_ORDER_ERROR",
    "FOK_ORDER_NOT_FILLED_ERROR",
    "MARKET_NOT_READY",
    "HTTP_ERROR",
    "UNKNOWN",
)

# Ordered: first matching substring wins.
_MESSAGE_PATTERNS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("price breaks minimum tick size",), "INVALID_ORDER_MIN_TICK_SIZE"),
    (("size lower than the minimum",), "INVALID_ORDER_MIN_SIZE"),
    (("duplicated",), "INVALID_ORDER_DUPLICATED"),
    (("not enough balance", "allowance"), "INVALID_ORDER_NOT_ENOUGH_BALANCE"),
    (("invalid expiration",), "INVALID_ORDER_EXPIRATION"),
    (("could not insert order",), "INVALID_ORDER_ERROR"),
    (("could not run the execution",), "EXECUTION_ERROR"),
    (("order match delayed",), "ORDER_DELAYED"),
    (("error delaying",), "DELAYING_ORDER_ERROR"),
    (("fok orders", "not fully filled"), "FOK_ORDER_NOT_FILLED_ERROR"),
    (("market is not yet ready",), "MARKET_NOT_READY"),
)

ORDER_ID_FIELDS = ("orderID", "orderId")
ERROR_MSG_FIELDS = ("errorMsg", "error_msg")
TX_HASH_FIELDS = ("transactionsHashes", "transactionHashes")


def classify_error_message(error_msg: Optional[str]) -> Optional[str]:
    """Map a CLOB error message to an error code.

    Returns ``None`` for an empty message and ``"UNKNOWN"`` when no known
    phrase matches.
    """
    if not error_msg:
        return None
    msg = error_msg.strip().lower()
    for needles, code in _MESSAGE_PATTERNS:
        if any(needle in msg for needle in needles):
            return code
    return "UNKNOWN"


def normalize_order_response(raw: Any) -> CreateOrderResult:
    order_id = first_field(raw, ORDER_ID_FIELDS)
    error_msg = first_field(raw, ERROR_MSG_FIELDS)
    tx_hashes = first_field(raw, TX_HASH_FIELDS)
    status = _get_field(raw, "status")

    accepted = _get_field(raw, "success") is True or bool(order_id)
    error_text = str(error_msg) if error_msg else None

    if accepted and not error_text:
        return CreateOrderResult(
            success=True,
            order_id=str(order_id) if order_id else None,
            status=str(status) if status else None,
            transaction_hashes=list(tx_hashes) if tx_hashes else None,
            raw=raw,
        )

    return CreateOrderResult(
        success=False,
        order_id=str(order_id) if order_id else None,
        status=str(status) if status else None,
        error_code=classify_error_message(error_text) or "UNKNOWN",
        error_msg=error_text or "Order was not accepted",
        transaction_hashes=list(tx_hashes) if tx_hashes else None,
        raw=raw,
    )


def _http_status(exc: BaseException) -> Optional[int]:
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def _exception_message(exc: BaseException) -> str:
    # py-clob-client keeps the API body on ``error_msg``; httpx on ``response``.
    body: Any = getattr(exc, "error_msg", None)
    if body is None:
        response = getattr(exc, "response", None)
        if response is not None:
            try:
                body = response.json()
            except Exception:
                body = None

    if isinstance(body, dict):
        detail = body.get("errorMsg") or body.get("error")
        if detail:
            return str(detail)
    elif isinstance(body, str) and body:
        return body

    return str(exc) or "Request failed"


def result_from_exception(exc: BaseException) -> CreateOrderResult:
    """Convert a submission-time exception into a failed result."""
    code = "HTTP_ERROR" if _http_status(exc) is not None else "UNKNOWN"
    return CreateOrderResult.failure(code, _exception_message(exc), raw=exc)
