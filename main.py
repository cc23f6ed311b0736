import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Sequence

from fastapi import APIRouter, FastAPI, Request, Response

from config import Settings
from loader import load_snapshots
from models import Snapshot
from rotator import SnapshotRotator

logger = logging.getLogger(__name__)

LOCATION_PATH = "/location/get"
EMPTY_SNAPSHOT = b"[]"

router = APIRouter()


def serialize_snapshot(snapshot: Snapshot) -> bytes:
    # NaN/Infinity are not JSON; refuse them instead of emitting invalid output
    return json.dumps(list(snapshot), allow_nan=False, separators=(',', ':')).encode('utf-8')


@router.get(LOCATION_PATH)
async def get_location(request: Request) -> Response:
    rotator: SnapshotRotator = request.app.state.rotator
    snapshot = rotator.current_snapshot()
    try:
        body = serialize_snapshot(snapshot)
    except Exception:
        logger.exception("Failed to serialize snapshot")
        return Response(content=EMPTY_SNAPSHOT, status_code=500, media_type="application/json")
    return Response(content=body, media_type="application/json")


def create_app(settings: Settings, snapshots: Sequence[Snapshot] | None = None) -> FastAPI:
    """
    Build the app. When `snapshots` is None they are loaded from settings.data_file
    during startup, so a bad file stops the server before it accepts connections.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        data = snapshots if snapshots is not None else load_snapshots(settings.data_file)
        rotator = SnapshotRotator(data)
        app.state.rotator = rotator
        task = asyncio.create_task(rotator.run(settings.interval))

        logger.info("Using file %s as mock data", settings.data_file)
        logger.info("Data points are updated ~every %ss", settings.interval)
        logger.info("Send queries to %s://%s:%d%s", settings.scheme, settings.host, settings.port, LOCATION_PATH)
        try:
            yield
        finally:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    app = FastAPI(title="Transit location mock", lifespan=lifespan)
    app.include_router(router)
    return app
