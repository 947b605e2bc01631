from .gesture import ConstraintOut, GestureOut
from .prediction import CandidateOut, PredictIn, PredictionOut, RecognizeIn, RecognizeOut

__all__ = [
    "CandidateOut",
    "ConstraintOut",
    "GestureOut",
    "PredictIn",
    "PredictionOut",
    "RecognizeIn",
    "RecognizeOut",
]
