"""In-process execution environment for marketfactory contracts.

The Chain supplies what contracts need from their runtime:

- caller identities (deterministic ``Signer`` accounts),
- contract deployment with addresses derived from ``(deployer, nonce)``,
- atomic, serialized state transitions: ``transact`` holds a lock, snapshots
  every contract's storage, and restores it if the call raises,
- deterministic reverts carrying reason strings,
- per-call gas accounting reported on a ``TransactionReceipt``.

When a ``TransactionLedger`` is attached, every finalized call (successful
or reverted) is appended to it, and ``Chain.from_ledger`` rebuilds the
same state by replaying those calls.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from marketfactory.config import MarketConfig
from marketfactory.contracts.base import CONTRACT_TYPES, MUTATING, VIEW, Contract
from marketfactory.core.errors import ContractNotFoundError, ReplayError, RevertError
from marketfactory.core.gas import GasMeter, GasSchedule
from marketfactory.core.hasher import (
    compute_tx_hash,
    derive_contract_address,
    derive_signer_address,
    normalize_address,
)
from marketfactory.core.tx_ledger import TransactionLedger
from marketfactory.models.accounts import Signer
from marketfactory.models.ledger import TransactionRecord
from marketfactory.models.receipts import TransactionReceipt, TxStatus

logger = logging.getLogger(__name__)

CONSTRUCTOR = "constructor"


@dataclass
class CallContext:
    """Execution context of the call currently running on the chain."""

    sender: str
    meter: GasMeter
    created: list[str] = field(default_factory=list)


def normalize_arg(value: Any) -> Any:
    """Reduce signers and handles to their address; leave other values as given."""
    if isinstance(value, (Signer, ContractHandle)):
        return value.address
    return value


def to_identity(value: Signer | ContractHandle | str) -> str:
    """Lowercase address of a signer, handle or address string."""
    return normalize_address(normalize_arg(value))


class ContractHandle:
    """Caller-side view of a deployed contract.

    Attribute access resolves to the contract's entry points: ``@view``
    methods return their value directly; ``@mutating`` methods are sent as
    transactions by the connected signer and return a receipt.

    >>> listing = chain.attach(Listing, address).connect(user1)
    >>> receipt = listing.list_item("Lamp", 5)
    >>> listing.get_item(0)
    ('Lamp', 5, False)
    """

    def __init__(
        self,
        chain: Chain,
        contract_cls: type[Contract],
        address: str,
        sender: str | None = None,
        deploy_receipt: TransactionReceipt | None = None,
    ) -> None:
        self._chain = chain
        self._contract_cls = contract_cls
        self.address = address
        self._sender = sender
        # Set on handles returned by Chain.deploy.
        self.deploy_receipt = deploy_receipt

    @property
    def contract_type(self) -> type[Contract]:
        return self._contract_cls

    @property
    def sender(self) -> str:
        return self._sender or self._chain.signers[0].address

    def connect(self, signer: Signer | str) -> ContractHandle:
        """Return a handle that sends transactions as *signer*."""
        return ContractHandle(
            self._chain, self._contract_cls, self.address, to_identity(signer)
        )

    def __getattr__(self, name: str) -> Any:
        kind = self._contract_cls.call_kind(name)
        if kind == VIEW:
            def _call(*args: Any) -> Any:
                return self._chain.call(self.address, name, list(args))
            return _call
        if kind == MUTATING:
            def _send(*args: Any) -> TransactionReceipt:
                return self._chain.transact(self.sender, self.address, name, list(args))
            return _send
        raise AttributeError(
            f"{self._contract_cls.__name__} has no entry point {name!r}"
        )

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ContractHandle):
            return self.address == other.address
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.address)

    def __repr__(self) -> str:
        return f"<{self._contract_cls.__name__} at {self.address}>"


class Chain:
    """Serialized, atomic execution environment.

    Parameters
    ----------
    config:
        Signer seed/count and gas schedule.  Defaults to ``MarketConfig()``.
    ledger:
        Optional transaction ledger every finalized call is appended to.
    """

    def __init__(
        self,
        config: MarketConfig | None = None,
        ledger: TransactionLedger | None = None,
    ) -> None:
        self._config = config or MarketConfig()
        self._ledger = ledger
        self._gas_schedule = GasSchedule.from_config(self._config)
        self._lock = threading.RLock()
        self._contracts: dict[str, Contract] = {}
        self._nonces: dict[str, int] = {}
        self._block_number = 0
        self._context_stack: list[CallContext] = []
        self._signers = [
            Signer(index=i, address=derive_signer_address(self._config.signer_seed, i))
            for i in range(self._config.signer_count)
        ]

    # ------------------------------------------------------------------
    # Accounts and introspection
    # ------------------------------------------------------------------

    @property
    def signers(self) -> list[Signer]:
        return list(self._signers)

    def get_signers(self, count: int | None = None) -> list[Signer]:
        return self.signers if count is None else self.signers[:count]

    @property
    def block_number(self) -> int:
        return self._block_number

    @property
    def ledger(self) -> TransactionLedger | None:
        return self._ledger

    @property
    def context(self) -> CallContext:
        if not self._context_stack:
            raise RuntimeError("No call is executing on this chain")
        return self._context_stack[-1]

    def get_nonce(self, address: str) -> int:
        return self._nonces.get(to_identity(address), 0)

    def is_contract(self, address: str) -> bool:
        return to_identity(address) in self._contracts

    def find_contracts(self, contract_cls: type[Contract]) -> list[str]:
        """Addresses of every deployed contract of *contract_cls*, oldest first."""
        with self._lock:
            return [
                addr for addr, c in self._contracts.items()
                if type(c) is contract_cls
            ]

    # ------------------------------------------------------------------
    # Deployment and attachment
    # ------------------------------------------------------------------

    def deploy(
        self,
        contract_cls: type[Contract],
        *args: Any,
        sender: Signer | str | None = None,
    ) -> ContractHandle:
        """Deploy a top-level contract in its own transaction."""
        from_addr = to_identity(sender) if sender is not None else self._signers[0].address
        receipt = self._execute(
            from_addr, "", CONSTRUCTOR, [normalize_arg(a) for a in args], contract_cls
        )
        return ContractHandle(
            self, contract_cls, receipt.contract_address, deploy_receipt=receipt
        )

    def attach(self, contract_cls: type[Contract], address: str) -> ContractHandle:
        """Return a handle to an existing contract of *contract_cls*."""
        addr = to_identity(address)
        contract = self._contracts.get(addr)
        if contract is None:
            raise ContractNotFoundError(f"No contract deployed at {address}")
        if not isinstance(contract, contract_cls):
            raise ContractNotFoundError(
                f"Contract at {address} is a {type(contract).__name__}, "
                f"not a {contract_cls.__name__}"
            )
        return ContractHandle(self, contract_cls, addr)

    def create(self, deployer: str, contract_cls: type[Contract], args: list[Any]) -> str:
        """Deploy *contract_cls* from inside the running call.

        Charges the create cost to the running transaction and runs the new
        contract's constructor with *deployer* as ``msg_sender``.
        """
        ctx = self.context
        nonce = self._nonces.get(deployer, 0)
        self._nonces[deployer] = nonce + 1
        address = derive_contract_address(deployer, nonce)

        ctx.meter.charge_create()
        contract = contract_cls(self, address)
        self._contracts[address] = contract
        self._context_stack.append(CallContext(sender=deployer, meter=ctx.meter))
        try:
            contract.constructor(*args)
        finally:
            self._context_stack.pop()
        ctx.created.append(address)
        logger.info(
            "Deployed %s at %s (deployer %s).", contract_cls.__name__, address, deployer
        )
        return address

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def call(self, address: str, method: str, args: list[Any]) -> Any:
        """Run a view method.  Never creates a transaction."""
        with self._lock:
            contract = self._get_contract(address)
            if contract.call_kind(method) != VIEW:
                raise AttributeError(f"{type(contract).__name__}.{method} is not a view")
            return getattr(contract, method)(*[normalize_arg(a) for a in args])

    def transact(
        self, sender: Signer | str, address: str, method: str, args: list[Any]
    ) -> TransactionReceipt:
        """Send a mutating call as *sender*.

        Returns the receipt on success.  On revert, every storage change the
        call made is undone, a ``reverted`` receipt is recorded, and the
        ``RevertError`` is re-raised with ``.receipt`` set.
        """
        contract = self._get_contract(address)
        if contract.call_kind(method) != MUTATING:
            raise AttributeError(f"{type(contract).__name__}.{method} is not a mutating call")
        return self._execute(
            to_identity(sender),
            contract.address,
            method,
            [normalize_arg(a) for a in args],
        )

    def _get_contract(self, address: str) -> Contract:
        contract = self._contracts.get(to_identity(address))
        if contract is None:
            raise ContractNotFoundError(f"No contract deployed at {address}")
        return contract

    def _execute(
        self,
        sender: str,
        to: str,
        method: str,
        args: list[Any],
        contract_cls: type[Contract] | None = None,
    ) -> TransactionReceipt:
        with self._lock:
            nonce = self._nonces.get(sender, 0)
            tx_hash = compute_tx_hash(
                {"sender": sender, "nonce": nonce, "to": to, "method": method, "args": args}
            )
            meter = GasMeter(self._gas_schedule, {"method": method, "args": args})
            ctx = CallContext(sender=sender, meter=meter)
            snapshot = self._snapshot()

            self._context_stack.append(ctx)
            try:
                if contract_cls is not None:
                    self.create(sender, contract_cls, args)
                else:
                    getattr(self._contracts[to], method)(*args)
            except RevertError as exc:
                self._restore(snapshot)
                self._nonces[sender] = nonce + 1
                receipt = self._finalize(
                    tx_hash, sender, to, method, args, contract_cls,
                    status=TxStatus.REVERTED,
                    gas_used=meter.intrinsic,
                    revert_reason=exc.reason,
                )
                exc.receipt = receipt
                logger.warning(
                    "Reverted %s.%s from %s: %s", to or "<create>", method, sender, exc.reason
                )
                raise
            except Exception:
                self._restore(snapshot)
                raise
            finally:
                self._context_stack.pop()

            self._nonces[sender] = nonce + 1
            return self._finalize(
                tx_hash, sender, to, method, args, contract_cls,
                status=TxStatus.SUCCESS,
                gas_used=meter.used,
                contract_address=ctx.created[0] if ctx.created else "",
            )

    def _finalize(
        self,
        tx_hash: str,
        sender: str,
        to: str,
        method: str,
        args: list[Any],
        contract_cls: type[Contract] | None,
        **outcome: Any,
    ) -> TransactionReceipt:
        self._block_number += 1
        receipt = TransactionReceipt(
            tx_hash=tx_hash,
            block_number=self._block_number,
            sender=sender,
            to=to,
            method=method,
            **outcome,
        )
        if self._ledger is not None:
            self._ledger.append(
                TransactionRecord.from_receipt(
                    receipt, args, contract_cls.__name__ if contract_cls else ""
                )
            )
        return receipt

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def _snapshot(self) -> dict[str, Any]:
        return {
            "contracts": dict(self._contracts),
            "storage": {addr: c.snapshot() for addr, c in self._contracts.items()},
            "nonces": dict(self._nonces),
        }

    def _restore(self, snapshot: dict[str, Any]) -> None:
        self._contracts = snapshot["contracts"]
        for addr, state in snapshot["storage"].items():
            self._contracts[addr].restore(state)
        self._nonces = snapshot["nonces"]

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    @classmethod
    def from_ledger(
        cls, ledger: TransactionLedger, config: MarketConfig | None = None
    ) -> Chain:
        """Rebuild a chain by replaying every call recorded in *ledger*.

        The hash chain is verified first.  Each call must reproduce its
        recorded outcome (status, transaction hash, created contract) or
        ``ReplayError`` is raised.  The returned chain appends new calls to
        the same ledger.
        """
        ledger.verify_chain()
        chain = cls(config=config)
        records = ledger.get_all()
        for record in records:
            chain._replay(record)
        chain._ledger = ledger
        logger.info("Replayed %d transaction(s) from %s.", len(records), ledger.db_path)
        return chain

    def _replay(self, record: TransactionRecord) -> None:
        contract_cls = None
        if record.method == CONSTRUCTOR:
            contract_cls = CONTRACT_TYPES.get(record.contract_type)
            if contract_cls is None:
                raise ReplayError(
                    f"Block {record.block_number}: unknown contract type "
                    f"{record.contract_type!r}"
                )
        elif record.to not in self._contracts:
            raise ReplayError(
                f"Block {record.block_number}: no contract at {record.to}"
            )

        try:
            receipt = self._execute(
                record.sender, record.to, record.method, record.args, contract_cls
            )
        except RevertError as exc:
            receipt = exc.receipt

        if (
            receipt.status != record.status
            or receipt.tx_hash != record.tx_hash
            or receipt.contract_address != record.contract_address
        ):
            raise ReplayError(
                f"Block {record.block_number}: replay of {record.method} produced "
                f"{receipt.status.value} {receipt.tx_hash}, ledger recorded "
                f"{record.status.value} {record.tx_hash}"
            )


__all__ = ["Chain", "ContractHandle", "CallContext", "normalize_arg", "to_identity"]
