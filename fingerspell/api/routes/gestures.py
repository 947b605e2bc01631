from fastapi import APIRouter, Depends, HTTPException

from fingerspell.api.deps import get_gesture_estimator
from fingerspell.api.schemas.gesture import GestureOut
from fingerspell.ml.scorer import GestureEstimator

router = APIRouter(prefix="/api/v1", tags=["gestures"])


@router.get("/gestures", response_model=list[GestureOut])
def list_gestures(estimator: GestureEstimator = Depends(get_gesture_estimator)):
    return [g.to_dict() for g in estimator.gestures]


@router.get("/gestures/{letter}", response_model=GestureOut)
def get_gesture(letter: str, estimator: GestureEstimator = Depends(get_gesture_estimator)):
    for g in estimator.gestures:
        if g.letter == letter.upper():
            return g.to_dict()
    raise HTTPException(404, "Gesture not found")
