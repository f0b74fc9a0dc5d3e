"""Value objects for order construction and session bootstrap."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

OrderSide = Literal["BUY", "SELL"]
TimeInForce = Literal["GTC", "GTD"]
MarketOrderType = Literal["FOK", "FAK"]
TickSizeMode = Literal["none", "validate", "round"]
TickRounding = Literal["nearest", "down", "up"]
MetaMode = Literal["auto", "manual"]

SIDES = ("BUY", "SELL")
TICK_SIZES = ("0.1", "0.01", "0.001", "0.0001")

SESSION_STEPS = (
    "init_relay_client",
    "derive_safe",
    "check_safe_deployed",
    "deploy_safe",
    "get_api_credentials",
    "check_approvals",
    "set_approvals",
    "complete",
)


@dataclass(slots=True)
class TokenMeta:
    """Cached CLOB metadata for one token."""

    tick_size: str
    neg_risk: bool
    fetched_at: float


@dataclass(slots=True)
class ResolvedMeta:
    tick_size: Optional[str] = None
    neg_risk: Optional[bool] = None


@dataclass(slots=True)
class ApiCredentials:
    key: str
    secret: str
    passphrase: str

    @property
    def complete(self) -> bool:
        return bool(self.key and self.secret and self.passphrase)


@dataclass(slots=True)
class ApprovalStatus:
    """Approval state of a Safe, keyed by spender name."""

    all_approved: bool
    usdc_approvals: dict[str, bool] = field(default_factory=dict)
    outcome_token_approvals: dict[str, bool] = field(default_factory=dict)


@dataclass(slots=True)
class EnsureApprovalsResult:
    did_submit_tx: bool
    approvals: ApprovalStatus


@dataclass(frozen=True, slots=True)
class TradingSession:
    eoa_address: str
    safe_address: str
    api_credentials: ApiCredentials
    approvals: ApprovalStatus


@dataclass(slots=True)
class ProgressEvent:
    step: str
    message: str


@dataclass(slots=True)
class LimitOrderRequest:
    """A limit order, or an aggressive limit when ``is_market_order`` is set.

    ``size`` is in shares. ``price`` is required unless ``is_market_order``.
    ``expiration_unix_seconds`` is required when ``time_in_force`` is GTD.
    """

    token_id: str
    size: float
    side: OrderSide
    price: Optional[float] = None
    mode: MetaMode = "auto"
    neg_risk: Optional[bool] = None
    is_market_order: bool = False
    time_in_force: TimeInForce = "GTC"
    expiration_unix_seconds: Optional[int] = None
    defer_exec: bool = False
    tick_size_mode: TickSizeMode = "none"
    tick_rounding: TickRounding = "nearest"
    tick_size: Optional[str] = None


@dataclass(slots=True)
class MarketOrderRequest:
    """A FOK/FAK market order.

    BUY spends ``amount_usdc``; SELL sells ``amount_shares``. ``price`` is an
    optional cap (BUY) or floor (SELL).
    """

    token_id: str
    side: OrderSide
    mode: MetaMode = "auto"
    neg_risk: Optional[bool] = None
    amount_usdc: Optional[float] = None
    amount_shares: Optional[float] = None
    price: Optional[float] = None
    order_type: MarketOrderType = "FOK"
    defer_exec: bool = False
    tick_size_mode: TickSizeMode = "none"
    tick_rounding: TickRounding = "nearest"
    tick_size: Optional[str] = None


@dataclass(slots=True)
class CreateOrderResult:
    """Outcome of an order submission.

    ``success`` means the CLOB accepted the order (it may still be delayed or
    unmatched); it says nothing about on-chain settlement.
    """

    success: bool
    order_id: Optional[str] = None
    status: Optional[str] = None
    error_code: Optional[str] = None
    error_msg: Optional[str] = None
    transaction_hashes: Optional[list[str]] = None
    raw: Any = None

    @classmethod
    def failure(cls, error_code: str, error_msg: str, raw: Any = None) -> "CreateOrderResult":
        return cls(success=False, error_code=error_code, error_msg=error_msg, raw=raw)


@dataclass(slots=True)
class BestBidAsk:
    bid_price: float
    ask_price: float
    mid_price: float
    spread: float
