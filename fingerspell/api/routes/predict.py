import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from fingerspell.api.deps import get_relay
from fingerspell.api.schemas.prediction import PredictIn
from fingerspell.exceptions import RelayConfigurationError, RelayError
from fingerspell.ml.relay import ModelRelay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["predict"])


@router.post("/predict-asl")
def predict_asl(payload: Optional[PredictIn] = None, relay: Optional[ModelRelay] = Depends(get_relay)):
    # sync route: the relay blocks while the model warms up, so it runs in the threadpool
    if payload is None or not payload.image_data:
        return JSONResponse(status_code=400, content={"error": "No image data provided"})
    if relay is None:
        logger.error("ASL_MODEL_API_URL is not set")
        return JSONResponse(status_code=500, content={"error": "Model API URL not configured"})

    try:
        return relay.predict(payload.image_data)
    except RelayConfigurationError as exc:
        return JSONResponse(status_code=500, content={"error": str(exc)})
    except RelayError as exc:
        content = {"error": exc.message, "details": exc.details}
        if exc.retry_after is not None:
            content["retry_after"] = exc.retry_after
        return JSONResponse(status_code=exc.status_code, content=content)
