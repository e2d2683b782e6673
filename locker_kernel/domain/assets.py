"""
Asset capabilities -- the external collaborators of the registry.

Responsibility:
    Declares, as structural protocols, the only surface the registry uses
    from the custodied asset, the per-position receipt asset, and the
    gateway that resolves addresses and deploys receipts.  Nothing here is
    implemented by the kernel.

Architecture position:
    Kernel > Domain -- pure interfaces, zero I/O.

Conventions:
    - Every state-changing call names the acting identity explicitly as its
      first argument (the ``msg.sender`` of the call).
    - Transfers, mints and burns return ``True`` on success and ``False``
      when refused.  They may also raise; the registry lets either abort
      the operation.
    - ``AssetGateway.atomic()`` is the external half of the registry's
      transaction boundary.  When the block exits with an exception, every
      external effect made inside it (transfers, mints, burns, receipt
      deployments) must be discarded.  A chain-backed gateway maps this to a
      reverting transaction.
"""

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable


@runtime_checkable
class FungibleAsset(Protocol):
    """The custodied asset (ERC-20 shaped)."""

    @property
    def address(self) -> str: ...

    def name(self) -> str: ...

    def symbol(self) -> str: ...

    def balance_of(self, owner: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...

    def approve(self, owner: str, spender: str, amount: int) -> bool: ...


@runtime_checkable
class ReceiptAsset(FungibleAsset, Protocol):
    """
    A receipt asset minted 1:1 against one position.

    mint is gated to the minter named at deployment; burn_from is gated by
    the owner's allowance to the spender.
    """

    def total_supply(self) -> int: ...

    def mint(self, minter: str, to: str, amount: int) -> bool: ...

    def burn_from(self, spender: str, owner: str, amount: int) -> bool: ...


class AssetGateway(Protocol):
    """Resolves asset addresses and deploys receipt assets."""

    def asset(self, address: str) -> FungibleAsset:
        """Raises AssetNotFoundError for unknown addresses."""
        ...

    def receipt(self, address: str) -> ReceiptAsset:
        """Raises AssetNotFoundError for unknown addresses."""
        ...

    def deploy_receipt(self, name: str, symbol: str, minter: str) -> ReceiptAsset:
        """Deploy a fresh receipt asset whose sole minter is ``minter``."""
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Transaction boundary for external effects."""
        ...
