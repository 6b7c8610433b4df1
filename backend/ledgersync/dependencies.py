from fastapi import Depends, Request

from ledgersync.services.session import LedgerSession


def get_ledger_session(request: Request) -> LedgerSession:
    return request.app.state.ledger_session


def require_identity(session: LedgerSession = Depends(get_ledger_session)) -> str:
    """Dependency: the connected identity, or NotInitialized (mapped to 409)."""
    return session.require_identity()
