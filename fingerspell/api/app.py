import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .deps import get_gesture_estimator, shutdown_landmarker
from .routes import gestures, predict, recognize
from .ws import router as ws_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    estimator = get_gesture_estimator()
    logger.info("gesture dictionary loaded: %d letters", len(estimator.gestures))
    yield
    shutdown_landmarker()


app = FastAPI(title="Fingerspell API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(gestures.router)
app.include_router(recognize.router)
app.include_router(predict.router)
app.include_router(ws_router)
