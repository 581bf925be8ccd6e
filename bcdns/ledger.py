"""
Ledger data reader interface.

Readers scan a blockchain for the trace data the cross-chain contracts leave
behind (messages plus the ledger proof that they were committed) and report
receipts for transactions that delivered messages. Identities verified with
this library are what later authenticates those messages; the reader itself
has no dependency on the certificate encoding.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List

logger = logging.getLogger(__name__)


class CrossChainMessageType(IntEnum):
    AUTH_MSG = 0
    DEVELOPER_DESIGN = 1


@dataclass(frozen=True)
class ProvableLedgerData:
    """Trace data read from the ledger together with its inclusion proof."""

    height: int
    block_hash: bytes
    timestamp: int
    ledger_data: bytes = b""
    proof: bytes = b""
    tx_hash: bytes = b""


@dataclass(frozen=True)
class CrossChainMessage:
    """A raw cross-chain message and where it was found on the ledger."""

    type: CrossChainMessageType
    message: bytes
    provable_data: ProvableLedgerData


@dataclass(frozen=True)
class CrossChainMessageReceipt:
    """Execution result of the transaction that committed a message."""

    tx_hash: str
    confirmed: bool
    successful: bool
    error_msg: str = ""


class CrossChainDataReader(ABC):
    """Reads cross-chain data from one blockchain."""

    @abstractmethod
    def read_messages_at_height(self, height: int) -> List[CrossChainMessage]:
        """Cross-chain messages found in the block at height."""

    @abstractmethod
    def read_receipt(self, tx_hash: str) -> CrossChainMessageReceipt:
        """Receipt of the transaction that committed a message."""

    @abstractmethod
    def latest_height(self) -> int:
        """Latest block height of the connected chain."""


class InMemoryDataReader(CrossChainDataReader):
    """
    Reader backed by in-process data, for local tools and tests.

    Usage:
        reader = InMemoryDataReader()
        reader.add_message(message)
        reader.set_receipt(CrossChainMessageReceipt("0xabc", True, True))
    """

    def __init__(self):
        self._messages: Dict[int, List[CrossChainMessage]] = {}
        self._receipts: Dict[str, CrossChainMessageReceipt] = {}
        self._latest_height = 0
        self._lock = threading.RLock()

    def add_message(self, message: CrossChainMessage) -> None:
        height = message.provable_data.height
        if height < 0:
            raise ValueError(f"Block height must be >= 0, got {height}")
        with self._lock:
            self._messages.setdefault(height, []).append(message)
            self._latest_height = max(self._latest_height, height)
        logger.debug(f"Recorded {message.type.name} message at height {height}")

    def set_receipt(self, receipt: CrossChainMessageReceipt) -> None:
        with self._lock:
            self._receipts[receipt.tx_hash] = receipt

    def read_messages_at_height(self, height: int) -> List[CrossChainMessage]:
        if height < 0:
            raise ValueError(f"Block height must be >= 0, got {height}")
        with self._lock:
            return list(self._messages.get(height, []))

    def read_receipt(self, tx_hash: str) -> CrossChainMessageReceipt:
        with self._lock:
            receipt = self._receipts.get(tx_hash)
        if receipt is None:
            return CrossChainMessageReceipt(
                tx_hash=tx_hash,
                confirmed=False,
                successful=False,
                error_msg="transaction not found",
            )
        return receipt

    def latest_height(self) -> int:
        with self._lock:
            return self._latest_height


__all__ = [
    "CrossChainMessageType",
    "ProvableLedgerData",
    "CrossChainMessage",
    "CrossChainMessageReceipt",
    "CrossChainDataReader",
    "InMemoryDataReader",
]
