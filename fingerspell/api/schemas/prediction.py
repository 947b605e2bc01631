from pydantic import BaseModel, Field
from typing import List, Optional


class RecognizeIn(BaseModel):
    landmarks: Optional[List[List[float]]] = None
    min_score: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    aspect_ratio: float = Field(default=1.0, gt=0.0)


class PredictionOut(BaseModel):
    letter: str
    confidence: float


class CandidateOut(BaseModel):
    letter: str
    score: float


class RecognizeOut(BaseModel):
    hand_detected: bool
    prediction: Optional[PredictionOut] = None
    candidates: List[CandidateOut] = []


class PredictIn(BaseModel):
    image_data: Optional[str] = Field(default=None, alias="imageData")
