from fastapi import APIRouter, Depends

from fingerspell.api.deps import get_gesture_estimator, get_settings
from fingerspell.api.schemas.prediction import RecognizeIn, RecognizeOut
from fingerspell.config import Settings
from fingerspell.ml.scorer import GestureEstimator

router = APIRouter(prefix="/api/v1", tags=["recognize"])

CANDIDATE_LIMIT = 5


@router.post("/recognize", response_model=RecognizeOut)
def recognize(
    payload: RecognizeIn,
    estimator: GestureEstimator = Depends(get_gesture_estimator),
    settings: Settings = Depends(get_settings),
):
    if not payload.landmarks:
        return RecognizeOut(hand_detected=False)

    min_score = payload.min_score if payload.min_score is not None else settings.min_score
    # every letter, best first; the threshold only gates the prediction
    matches = estimator.estimate(payload.landmarks, min_score=0.0, aspect_ratio=payload.aspect_ratio)
    best = matches[0] if matches and matches[0].score >= min_score else None

    return RecognizeOut(
        hand_detected=True,
        prediction=best.to_prediction().to_dict() if best is not None else None,
        candidates=[m.to_dict() for m in matches[:CANDIDATE_LIMIT]],
    )
