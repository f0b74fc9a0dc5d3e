"""Trading session bootstrap: Safe, API credentials and approvals."""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

import structlog

from src.chain.approvals import ApprovalManager
from src.chain.safe import derive_safe_address
from src.chain.transactions import SafeTransaction, create_redeem_tx
from src.exceptions import SafeDeploymentError, SafeNotDeployedError
from src.trading.metadata import DEFAULT_TTL_SECONDS, TokenMetaCache
from src.trading.models import (
    ApiCredentials,
    ApprovalStatus,
    EnsureApprovalsResult,
    ProgressEvent,
    TradingSession,
)
from src.trading.orders import OrderBuilder
from src.trading.protocols import ChainReader, NetworkOrderClient, RelayClient, Signer
from src.utils.parsing import first_field

logger = structlog.get_logger()

DEFAULT_CHAIN_ID = 137

RelayClientFactory = Callable[[], RelayClient]
ClobClientFactory = Callable[[Optional[ApiCredentials], Optional[str]], NetworkOrderClient]
ProgressCallback = Callable[[ProgressEvent], None]


class TradingKit:
    """Turns an EOA into a ready-to-trade Polymarket Safe session.

    Collaborators are injected so every step can be driven by fakes:
    ``relay_client_factory()`` builds a relayer client, and
    ``clob_factory(credentials, funder)`` builds a CLOB client (with
    ``credentials=None`` for the key-derivation client).
    """

    def __init__(
        self,
        *,
        signer: Signer,
        chain_reader: ChainReader,
        relay_client_factory: RelayClientFactory,
        clob_factory: ClobClientFactory,
        eoa_address: Optional[str] = None,
        approvals: Optional[ApprovalManager] = None,
        chain_id: int = DEFAULT_CHAIN_ID,
        meta_ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ) -> None:
        self.signer = signer
        self.eoa_address = eoa_address or signer.address
        self.chain_id = chain_id
        self._chain_reader = chain_reader
        self._relay_client_factory = relay_client_factory
        self._clob_factory = clob_factory
        self._approvals = approvals or ApprovalManager(chain_reader)
        self._meta_ttl_seconds = meta_ttl_seconds

    @classmethod
    def from_settings(cls) -> "TradingKit":
        """Build a kit from global settings.

        Raises ConfigError if RPC, key or builder signing config is missing.
        """
        from config.settings import settings
        from config.validators import validate_trading_config
        from src.chain.reader import RpcChainReader
        from src.clients.clob import ClobNetworkClient
        from src.clients.relayer import BuilderRelayClient
        from src.clients.signer import LocalSigner

        validate_trading_config()
        signer = LocalSigner(settings.POLYMARKET_PRIVATE_KEY)

        def clob_factory(creds: Optional[ApiCredentials], funder: Optional[str]) -> NetworkOrderClient:
            return ClobNetworkClient.create(
                host=settings.POLYMARKET_CLOB_HTTP,
                chain_id=settings.POLYMARKET_CHAIN_ID,
                private_key=settings.POLYMARKET_PRIVATE_KEY,
                api_credentials=creds,
                funder=funder,
            )

        reader = RpcChainReader(settings.POLYGON_RPC_URL, timeout=settings.HTTP_TIMEOUT_SECONDS)
        return cls(
            signer=signer,
            eoa_address=settings.POLYMARKET_WALLET_ADDRESS or None,
            chain_reader=reader,
            relay_client_factory=BuilderRelayClient.from_settings,
            clob_factory=clob_factory,
            approvals=ApprovalManager(reader, threshold=settings.USDC_APPROVAL_THRESHOLD),
            chain_id=settings.POLYMARKET_CHAIN_ID,
            meta_ttl_seconds=settings.TOKEN_META_TTL_SECONDS,
        )

    # -- Safe --------------------------------------------------------------

    def create_relay_client(self) -> RelayClient:
        return self._relay_client_factory()

    def derive_safe_address(self) -> str:
        return derive_safe_address(self.eoa_address, self.chain_id)

    async def is_safe_deployed(self, safe_address: str) -> bool:
        code = await self._chain_reader.get_bytecode(safe_address)
        return bool(code) and code != "0x" and len(code) > 2

    async def deploy_safe(self, relay_client: RelayClient) -> str:
        response = await relay_client.deploy()
        result = await response.wait()
        proxy_address = first_field(result, ("proxyAddress", "proxy_address"))
        if not proxy_address:
            raise SafeDeploymentError("Safe deployment failed")
        logger.info("safe_deployed", safe=proxy_address)
        return str(proxy_address)

    # -- API credentials ---------------------------------------------------

    async def derive_api_credentials(
        self, client: Optional[NetworkOrderClient] = None
    ) -> Optional[ApiCredentials]:
        """Derive existing credentials; ``None`` if none exist or the call fails."""
        client = client or self._clob_factory(None, None)
        try:
            creds = await client.derive_api_key()
        except Exception as e:
            logger.info("api_key_derive_failed", error=str(e))
            return None
        if creds is None or not creds.complete:
            return None
        return creds

    async def create_api_credentials(
        self, client: Optional[NetworkOrderClient] = None
    ) -> ApiCredentials:
        client = client or self._clob_factory(None, None)
        creds = await client.create_api_key()
        logger.info("api_key_created", key=creds.key[:8])
        return creds

    async def get_or_create_api_credentials(self) -> ApiCredentials:
        client = self._clob_factory(None, None)
        derived = await self.derive_api_credentials(client)
        if derived is not None:
            return derived
        return await self.create_api_credentials(client)

    def create_clob_client(self, api_credentials: ApiCredentials, safe_address: str) -> NetworkOrderClient:
        return self._clob_factory(api_credentials, safe_address)

    def create_order_builder(self, clob_client: NetworkOrderClient) -> OrderBuilder:
        cache = TokenMetaCache(clob_client.get_order_book, ttl_seconds=self._meta_ttl_seconds)
        return OrderBuilder(clob_client, cache)

    # -- Approvals ---------------------------------------------------------

    async def check_approvals(self, safe_address: str) -> ApprovalStatus:
        return await self._approvals.check_all_approvals(safe_address)

    async def ensure_approvals(self, relay_client: RelayClient, safe_address: str) -> EnsureApprovalsResult:
        approvals = await self.check_approvals(safe_address)
        if approvals.all_approved:
            return EnsureApprovalsResult(did_submit_tx=False, approvals=approvals)

        await self.execute_transactions(
            relay_client,
            self._approvals.create_all_approval_txs(),
            "Set all token approvals for trading",
        )
        after = await self.check_approvals(safe_address)
        return EnsureApprovalsResult(did_submit_tx=True, approvals=after)

    # -- Relayed transactions ----------------------------------------------

    async def execute_transactions(
        self, relay_client: RelayClient, txs: Sequence[SafeTransaction], description: str
    ) -> Any:
        """Relay ``txs`` and wait for a single acknowledgement."""
        response = await relay_client.execute(list(txs), description)
        return await response.wait()

    async def redeem_position(self, relay_client: RelayClient, condition_id: str, outcome_index: int) -> Any:
        tx = create_redeem_tx(condition_id, outcome_index)
        return await self.execute_transactions(
            relay_client, [tx], f"Redeem position for condition {condition_id}"
        )

    # -- Bootstrap ---------------------------------------------------------

    async def initialize_trading_session(
        self,
        on_progress: Optional[ProgressCallback] = None,
        auto_deploy_safe: bool = True,
    ) -> TradingSession:
        """Run the bootstrap steps in order; any failure aborts the session.

        Steps: init_relay_client, derive_safe, check_safe_deployed,
        [deploy_safe], get_api_credentials, check_approvals, [set_approvals],
        complete.
        """

        def progress(step: str, message: str) -> None:
            logger.info("session_step", step=step, eoa=self.eoa_address)
            if on_progress is not None:
                on_progress(ProgressEvent(step=step, message=message))

        progress("init_relay_client", "Initializing relay client")
        relay_client = self.create_relay_client()

        progress("derive_safe", "Deriving Safe address")
        safe_address = self.derive_safe_address()

        progress("check_safe_deployed", "Checking if Safe is deployed")
        if not await self.is_safe_deployed(safe_address):
            if not auto_deploy_safe:
                raise SafeNotDeployedError("Safe is not deployed")
            progress("deploy_safe", "Deploying Safe")
            await self.deploy_safe(relay_client)

        progress("get_api_credentials", "Getting user API credentials")
        api_credentials = await self.get_or_create_api_credentials()

        progress("check_approvals", "Checking token approvals")
        approvals = await self.check_approvals(safe_address)
        if not approvals.all_approved:
            progress("set_approvals", "Setting token approvals")
            approvals = (await self.ensure_approvals(relay_client, safe_address)).approvals

        progress("complete", "Trading session is ready")
        return TradingSession(
            eoa_address=self.eoa_address,
            safe_address=safe_address,
            api_credentials=api_credentials,
            approvals=approvals,
        )
