"""SSML endpoints: compile annotated text, validate documents."""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated, Literal, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from art_audio_study import AnnotationModel, SSMLCompiler, SSMLValidator
from art_audio_study.models import BreakMark, EmphasisMark, Mark, ProsodyMark

from ..config import Settings, get_settings

router = APIRouter()


class EmphasisMarkSchema(BaseModel):
    kind: Literal["emphasis"] = "emphasis"
    start: int
    end: int
    level: Literal["reduced", "moderate", "strong"] = "moderate"

    def to_mark(self) -> Mark:
        return EmphasisMark(self.start, self.end, self.level)


class ProsodyMarkSchema(BaseModel):
    kind: Literal["prosody"] = "prosody"
    start: int
    end: int
    pitch: str | None = None
    rate: str | None = None
    volume: str | None = None

    def to_mark(self) -> Mark:
        return ProsodyMark(self.start, self.end, pitch=self.pitch, rate=self.rate, volume=self.volume)


class BreakMarkSchema(BaseModel):
    kind: Literal["break"] = "break"
    at: int
    duration_ms: int = Field(ge=0)

    def to_mark(self) -> Mark:
        return BreakMark(self.at, self.duration_ms)


MarkSchema = Annotated[
    Union[EmphasisMarkSchema, ProsodyMarkSchema, BreakMarkSchema],
    Field(discriminator="kind"),
]


class CompileRequest(BaseModel):
    text: str
    marks: list[MarkSchema] = []
    voice_name: str | None = None
    language: str | None = None


class CompileResponse(BaseModel):
    ssml: str
    marks: list[MarkSchema]


class ValidateRequest(BaseModel):
    ssml: str


class ValidationIssueResponse(BaseModel):
    severity: str
    rule: str
    message: str
    line: int | None = None


class ValidateResponse(BaseModel):
    valid: bool
    issues: list[ValidationIssueResponse]


@router.post("/compile", response_model=CompileResponse)
async def compile_ssml(
    request: CompileRequest,
    settings: Settings = Depends(get_settings),
) -> CompileResponse:
    model = AnnotationModel(request.text)
    model.extend(m.to_mark() for m in request.marks)

    compiler = SSMLCompiler(
        voice_name=request.voice_name or settings.voice_name,
        language=request.language or settings.language,
    )
    ssml = compiler.compile_model(model)
    ordered = [asdict(m) for m in model.marks_ordered_for_compilation()]
    return CompileResponse.model_validate({"ssml": ssml, "marks": ordered})


@router.post("/validate", response_model=ValidateResponse)
async def validate_ssml(request: ValidateRequest) -> ValidateResponse:
    result = SSMLValidator().validate(request.ssml)
    issues = [
        ValidationIssueResponse(
            severity=issue.severity,
            rule=issue.rule,
            message=issue.message,
            line=issue.line,
        )
        for issue in result.issues
    ]
    return ValidateResponse(valid=result.valid, issues=issues)
