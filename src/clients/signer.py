"""Local EOA signer backed by eth-account."""

from __future__ import annotations

from eth_account import Account
from eth_account.messages import encode_defunct


class LocalSigner:
    """Holds an EOA key in memory and signs EIP-191 messages with it."""

    def __init__(self, private_key: str) -> None:
        self._account = Account.from_key(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_message(self, message: bytes) -> str:
        signed = self._account.sign_message(encode_defunct(primitive=message))
        return "0x" + bytes(signed.signature).hex()
