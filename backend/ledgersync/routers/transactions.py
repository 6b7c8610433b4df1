from fastapi import APIRouter, Depends

from ledgersync.dependencies import get_ledger_session
from ledgersync.schemas.ledger import TransactionResult
from ledgersync.schemas.views import ReceiptView
from ledgersync.services.session import LedgerSession

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.get("/{tx_hash}", response_model=ReceiptView)
async def get_receipt(
    tx_hash: str,
    session: LedgerSession = Depends(get_ledger_session),
):
    """Current receipt state; a pending transaction is reported as unconfirmed."""
    receipt = await session.gateway.get_transaction_receipt(tx_hash)
    if not receipt or receipt.get("blockNumber") is None:
        return ReceiptView(tx_hash=tx_hash, confirmed=False)
    return ReceiptView(tx_hash=tx_hash, confirmed=True, result=TransactionResult.from_receipt(receipt))


@router.post("/{tx_hash}/wait", response_model=TransactionResult)
async def wait_for_receipt(
    tx_hash: str,
    session: LedgerSession = Depends(get_ledger_session),
):
    receipt = await session.gateway.wait_for_transaction(tx_hash)
    return TransactionResult.from_receipt(receipt)
