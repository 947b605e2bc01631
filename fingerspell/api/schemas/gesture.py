from pydantic import BaseModel
from typing import List


class ConstraintOut(BaseModel):
    finger: str
    value: str
    weight: float


class GestureOut(BaseModel):
    letter: str
    curls: List[ConstraintOut]
    directions: List[ConstraintOut]
