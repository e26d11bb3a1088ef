import re
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import TimeExhausted, TransactionNotFound, Web3Exception

from intake.config.settings import Settings
from intake.notary.exceptions import (
    LedgerNetworkError,
    MissingReceiptError,
    ReceiptTimeoutError,
    SigningKeyMissingError,
)
from intake.notary.models import TransactionReceipt

_TX_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")
_RPC_REQUEST_TIMEOUT_SECONDS = 30


def is_transaction_hash(value: str) -> bool:
    return bool(_TX_HASH_PATTERN.match(value or ""))


class LedgerClient:
    """Thin web3.py wrapper for data-carrying transactions on an EVM chain.

    Built once from validated settings; the signing account is read-only
    for the life of the process.
    """

    def __init__(
        self,
        *,
        web3: Web3,
        chain_id: int,
        burn_address: str,
        gas_limit: int,
        receipt_timeout_seconds: int,
        account: LocalAccount | None = None,
    ) -> None:
        self._web3 = web3
        self._chain_id = chain_id
        self._burn_address = Web3.to_checksum_address(burn_address)
        self._gas_limit = gas_limit
        self._receipt_timeout_seconds = receipt_timeout_seconds
        self._account = account

    @property
    def can_sign(self) -> bool:
        return self._account is not None

    def send_data_transaction(self, data: str) -> str:
        """Send a zero-value transaction to the burn address carrying `data`.

        Returns:
            The 0x-prefixed transaction hash.

        Raises:
            SigningKeyMissingError: if no signing key is configured.
            LedgerNetworkError: if the node cannot be reached or rejects the transaction.
        """
        if self._account is None:
            raise SigningKeyMissingError("No ledger signing key configured")
        try:
            transaction: dict[str, Any] = {
                "to": self._burn_address,
                "value": 0,
                "data": data,
                "gas": self._gas_limit,
                "gasPrice": self._web3.eth.gas_price,
                "nonce": self._web3.eth.get_transaction_count(self._account.address, "pending"),
                "chainId": self._chain_id,
            }
            signed = self._account.sign_transaction(transaction)
            tx_hash = self._web3.eth.send_raw_transaction(signed.raw_transaction)
        except (Web3Exception, OSError, ValueError) as exc:
            raise LedgerNetworkError(f"Failed to send transaction: {exc}") from exc
        return Web3.to_hex(tx_hash)

    def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        """Block until the transaction is mined (one confirmation).

        Raises:
            ReceiptTimeoutError: if the configured wait elapses first.
            MissingReceiptError: if the node answers without a receipt.
            LedgerNetworkError: on RPC failure.
        """
        try:
            receipt = self._web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout_seconds
            )
        except TimeExhausted as exc:
            raise ReceiptTimeoutError(
                f"Transaction {tx_hash} not mined after {self._receipt_timeout_seconds}s"
            ) from exc
        except (Web3Exception, OSError, ValueError) as exc:
            raise LedgerNetworkError(f"Failed to fetch receipt for {tx_hash}: {exc}") from exc
        if receipt is None:
            raise MissingReceiptError(f"Transaction {tx_hash} returned no receipt")
        return _to_receipt(receipt)

    def get_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        """Look up a receipt without waiting; None if the transaction is unknown.

        Raises:
            LedgerNetworkError: on RPC failure.
        """
        try:
            receipt = self._web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except (Web3Exception, OSError, ValueError) as exc:
            raise LedgerNetworkError(f"Failed to fetch receipt for {tx_hash}: {exc}") from exc
        if receipt is None:
            return None
        return _to_receipt(receipt)


def _to_receipt(receipt: Any) -> TransactionReceipt:
    return TransactionReceipt(
        transaction_hash=Web3.to_hex(receipt["transactionHash"]),
        block_number=receipt.get("blockNumber"),
        succeeded=receipt.get("status") == 1,
    )


def build_ledger_client(settings: Settings) -> LedgerClient:
    """Build a LedgerClient from settings; a missing key yields a read-only client."""
    web3 = Web3(
        Web3.HTTPProvider(
            settings.ledger_rpc_url,
            request_kwargs={"timeout": _RPC_REQUEST_TIMEOUT_SECONDS},
        )
    )
    account = (
        Account.from_key(settings.ledger_private_key)
        if settings.ledger_private_key
        else None
    )
    return LedgerClient(
        web3=web3,
        chain_id=settings.ledger_chain_id,
        burn_address=settings.ledger_burn_address,
        gas_limit=settings.ledger_gas_limit,
        receipt_timeout_seconds=settings.ledger_receipt_timeout_seconds,
        account=account,
    )
