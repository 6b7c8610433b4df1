from fastapi import APIRouter, Depends

from ledgersync.dependencies import get_ledger_session, require_identity
from ledgersync.errors import ProviderUnavailable
from ledgersync.formatting import format_ether
from ledgersync.schemas.requests import ProviderEventRequest
from ledgersync.schemas.views import BalanceView, SessionStatus
from ledgersync.services.session import LedgerSession

router = APIRouter(prefix="/api/session", tags=["Session"])


@router.get("/", response_model=SessionStatus)
async def get_session_status(session: LedgerSession = Depends(get_ledger_session)):
    return session.status()


@router.post("/connect", response_model=SessionStatus)
async def connect(session: LedgerSession = Depends(get_ledger_session)):
    await session.connect()
    return session.status()


@router.post("/disconnect", response_model=SessionStatus)
async def disconnect(session: LedgerSession = Depends(get_ledger_session)):
    session.disconnect()
    return session.status()


@router.post("/events", response_model=SessionStatus)
async def push_provider_event(
    payload: ProviderEventRequest,
    session: LedgerSession = Depends(get_ledger_session),
):
    """Forward an accountsChanged / chainChanged notification from the signing provider."""
    if session.gateway.provider is None:
        raise ProviderUnavailable("No signing provider available")
    await session.gateway.provider.emit(payload.event, payload.payload)
    return session.status()


@router.post("/switch-identity", response_model=SessionStatus)
async def switch_identity(session: LedgerSession = Depends(get_ledger_session)):
    await session.switch_identity()
    return session.status()


@router.get("/balance", response_model=BalanceView)
async def get_balance(
    identity: str = Depends(require_identity),
    session: LedgerSession = Depends(get_ledger_session),
):
    wei = await session.gateway.get_balance_wei()
    return BalanceView(identity=identity, wei=str(wei), ether=format_ether(wei))
