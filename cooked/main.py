import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from . import client
from .config import Settings, get_settings
from .errors import LeagueLoadError
from .models.dashboard import OverviewView, PodiumView, RecordsView, RosterView, TradeView
from .models.sleeper import LeagueSession
from .services import dashboard, sleeper_service

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_settings())
    yield


app = FastAPI(lifespan=lifespan)

# Configure CORS for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_http_client(settings: Settings = Depends(get_settings)):
    async with client.create_http_client(settings) as http:
        yield http


async def load_session(
    league_id: str,
    settings: Settings = Depends(get_settings),
    http=Depends(get_http_client),
) -> LeagueSession:
    """One full league load per request, bounded by ``load_timeout``.

    Hitting the deadline cancels every request still in flight.
    """
    try:
        return await asyncio.wait_for(
            sleeper_service.load_league(http, league_id, settings),
            timeout=settings.load_timeout,
        )
    except LeagueLoadError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except asyncio.TimeoutError:
        logger.warning("Loading league %s exceeded %ss", league_id, settings.load_timeout)
        raise HTTPException(status_code=504, detail="Timed out loading league")


@app.get("/")
def read_root():
    return {"status": "ok", "tabs": list(dashboard.TAB_VIEWS)}


@app.get("/dashboard")
async def get_dashboard(
    league: str = Query(..., min_length=1),
    tab: str = "overview",
    settings: Settings = Depends(get_settings),
    http=Depends(get_http_client),
):
    """Deep-link entry point: ``/dashboard?league=<id>&tab=<tab>``."""
    view = dashboard.TAB_VIEWS.get(tab)
    if view is None:
        raise HTTPException(status_code=404, detail=f"Unknown tab '{tab}'")
    session = await load_session(league, settings, http)
    return {"league_id": league, "tab": tab, "view": view(session, settings)}


@app.get("/league/{league_id}/overview", response_model=OverviewView)
async def get_overview(session: LeagueSession = Depends(load_session), settings: Settings = Depends(get_settings)):
    return dashboard.build_overview(session, settings)


@app.get("/league/{league_id}/records", response_model=RecordsView)
async def get_records(session: LeagueSession = Depends(load_session), settings: Settings = Depends(get_settings)):
    return dashboard.build_records(session, settings)


@app.get("/league/{league_id}/trophies", response_model=List[PodiumView])
async def get_trophy_room(session: LeagueSession = Depends(load_session), settings: Settings = Depends(get_settings)):
    return dashboard.build_trophy_room(session, settings)


@app.get("/league/{league_id}/toilet", response_model=List[PodiumView])
async def get_toilet_bowl(session: LeagueSession = Depends(load_session), settings: Settings = Depends(get_settings)):
    return dashboard.build_toilet_bowl(session, settings)


@app.get("/league/{league_id}/trades", response_model=List[TradeView])
async def get_trades(session: LeagueSession = Depends(load_session), settings: Settings = Depends(get_settings)):
    return dashboard.build_trades(session, settings)


@app.get("/league/{league_id}/rosters", response_model=List[RosterView])
async def get_rosters(session: LeagueSession = Depends(load_session), settings: Settings = Depends(get_settings)):
    return dashboard.build_rosters(session, settings)
