from fastapi import APIRouter, Depends

from ledgersync.dependencies import get_ledger_session
from ledgersync.schemas.views import DashboardView
from ledgersync.services.session import LedgerSession

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/", response_model=DashboardView)
async def get_dashboard(session: LedgerSession = Depends(get_ledger_session)):
    summary = await session.dashboard()
    return DashboardView.from_summary(summary)
