"""Pure projection from pipeline state to what a screen draws."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .adapters import DiagnosticResult, DiseaseResult, PestImageResult, PestQueryResult
from .pipeline import PipelineState, PipelineStatus


@dataclass(frozen=True)
class ResultField:
    key: str
    label: str
    value: str


@dataclass(frozen=True)
class ResultRecord:
    fields: Tuple[ResultField, ...]
    image_url: Optional[str] = None
    image_label: Optional[str] = None

    def get(self, key: str) -> Optional[str]:
        for f in self.fields:
            if f.key == key:
                return f.value
        return None


@dataclass(frozen=True)
class DisplayModel:
    is_loading: bool
    error_text: Optional[str] = None
    result_fields: Optional[ResultRecord] = None
    preview_uri: Optional[str] = None


def _result_fields(result: DiagnosticResult) -> List[Tuple[str, str, str]]:
    # (key, label key, value)
    if isinstance(result, DiseaseResult):
        return [
            ("predicted_label", "diseaseIdentified", result.predicted_label),
            ("explanation", "explanation", result.explanation),
        ]
    if isinstance(result, PestImageResult):
        return [
            ("predicted_label", "pestIdentified", result.predicted_label),
            ("explanation", "explanation", result.explanation),
            ("control", "control", result.control),
        ]
    if isinstance(result, PestQueryResult):
        rows = [
            ("pest_name", "pestIdentified", result.pest_name),
            ("pesticide", "recommendedPesticide", result.pesticide),
        ]
        if result.ai_explanation:
            rows.append(("ai_explanation", "aiExplanation", result.ai_explanation))
        return rows
    raise TypeError(f"unsupported result type {type(result).__name__}")


def present(
    state: PipelineState,
    text: Callable[[str], str] = lambda key: key,
    preview_uri: Optional[str] = None,
) -> DisplayModel:
    result = None
    if state.status == PipelineStatus.SUCCEEDED and state.result is not None:
        fields = tuple(ResultField(key, text(label), value) for key, label, value in _result_fields(state.result))
        image_url = getattr(state.result, "image_url", None)
        result = ResultRecord(
            fields=fields,
            image_url=image_url,
            image_label=text("pestImage") if image_url else None,
        )

    error_text = None
    if state.status == PipelineStatus.FAILED:
        error_text = state.error_message or (state.error.message if state.error else None) or "Unknown error"

    return DisplayModel(
        is_loading=state.status == PipelineStatus.SUBMITTING,
        error_text=error_text,
        result_fields=result,
        preview_uri=preview_uri,
    )
