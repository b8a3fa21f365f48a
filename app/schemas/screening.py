from pydantic import BaseModel
from typing import List


class ClassScoreSchema(BaseModel):
    label: str
    value: float


class ClassificationResultSchema(BaseModel):
    anomaly: bool
    results: List[ClassScoreSchema]


class InterpretationSchema(BaseModel):
    hasParkinson: bool
    confidence: float
    message: str


class AnalysisResponse(BaseModel):
    success: bool = True
    result: ClassificationResultSchema
    interpretation: InterpretationSchema


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: str


class ReadingTextResponse(BaseModel):
    text: str


class ModelInfoResponse(BaseModel):
    owner: str
    name: str
    version: str
    classifier: str
    labels: List[str]
    positive_label: str
    input_length: int
    threshold: float
