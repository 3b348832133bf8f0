"""
AI 모듈 데이터 모델
감정 분석 결과(AnalysisResult)와 게이트웨이 요청용 메시지 파트.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


VALID_EMOTIONS = frozenset({
    "Joy", "Sadness", "Anger", "Surprise", "Fear", "Disgust", "Neutral"
})

RESULT_FIELDS = ("emotion", "confidence", "explanation", "emoji", "color")

FALLBACK_EMOTION = "Neutral"
FALLBACK_CONFIDENCE = 0.0
FALLBACK_EXPLANATION = "Unable to parse AI response reliably; defaulting to Neutral."
FALLBACK_EMOJI = "😐"
FALLBACK_COLOR = "gray-400"


class InputMode(str, Enum):
    """브라우저에서 들어오는 입력 종류."""
    TEXT = "TEXT"
    VOICE = "VOICE"
    WEBCAM = "WEBCAM"


def is_known_emotion(emotion: str) -> bool:
    """프롬프트가 약속한 감정 집합에 속하는지. 결과 검증에는 쓰지 않는다."""
    return emotion in VALID_EMOTIONS


def _coerce_str(value: Any, default: str) -> str:
    """UTF-8로 인코딩되지 않는 문자열(짝 없는 surrogate 등)은 타입이 틀린 것으로 본다."""
    if not isinstance(value, str):
        return default
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return default
    return value


def _is_strict_json(value: Any) -> bool:
    """응답 본문으로 그대로 내보낼 수 있는 값인지 (NaN/Infinity, 깨진 surrogate 불가)."""
    try:
        json.dumps(value, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (ValueError, TypeError, RecursionError):
        return False
    return True


def _coerce_confidence(value: Any) -> float:
    """int/float/숫자 문자열만 허용. bool, NaN/Infinity는 기본값. 범위 clamp 안 함."""
    if isinstance(value, bool):
        return FALLBACK_CONFIDENCE
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return FALLBACK_CONFIDENCE
    else:
        return FALLBACK_CONFIDENCE
    if not math.isfinite(number):
        return FALLBACK_CONFIDENCE
    return number


@dataclass
class AnalysisResult:
    """LLM 감정 분석 결과 (감정 + 신뢰도 + 설명 + 이모지 + 색상 토큰)"""
    emotion: str
    confidence: float
    explanation: str
    emoji: str
    color: str  # Tailwind 색상 토큰 (예: "yellow-400")
    extra: Dict[str, Any] = field(default_factory=dict)  # 모델이 덧붙인 나머지 키 (meta 등)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        """
        파싱된 JSON 객체를 결과 형태로 맞춤. 없거나 타입이 틀린 필드는 fallback 값.
        나머지 키는 엄격한 JSON으로 다시 직렬화되는 것만 extra에 남긴다.
        """
        extra = {
            k: v for k, v in data.items()
            if k not in RESULT_FIELDS and _is_strict_json({k: v})
        }
        return cls(
            emotion=_coerce_str(data.get("emotion"), FALLBACK_EMOTION),
            confidence=_coerce_confidence(data.get("confidence")),
            explanation=_coerce_str(data.get("explanation"), FALLBACK_EXPLANATION),
            emoji=_coerce_str(data.get("emoji"), FALLBACK_EMOJI),
            color=_coerce_str(data.get("color"), FALLBACK_COLOR),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "emotion": self.emotion,
            "confidence": self.confidence,
            "explanation": self.explanation,
            "emoji": self.emoji,
            "color": self.color,
        }
        for key, value in self.extra.items():
            out.setdefault(key, value)
        return out


def fallback_result() -> AnalysisResult:
    """파싱 불가 시 반환하는 고정 기본값 (매번 새 인스턴스)."""
    return AnalysisResult(
        emotion=FALLBACK_EMOTION,
        confidence=FALLBACK_CONFIDENCE,
        explanation=FALLBACK_EXPLANATION,
        emoji=FALLBACK_EMOJI,
        color=FALLBACK_COLOR,
    )


FALLBACK_RESULT = fallback_result()


@dataclass(frozen=True)
class TextPart:
    """user 턴의 텍스트 파트"""
    text: str


@dataclass(frozen=True)
class MediaPart:
    """user 턴의 미디어 파트 (data URL)"""
    url: str
    detail: Optional[str] = None


MessagePart = Union[TextPart, MediaPart]


def part_to_openai(part: MessagePart) -> Dict[str, Any]:
    """메시지 파트를 OpenAI 호환 content 파트 dict로 변환."""
    if isinstance(part, TextPart):
        return {"type": "text", "text": part.text}
    if isinstance(part, MediaPart):
        image_url: Dict[str, Any] = {"url": part.url}
        if part.detail:
            image_url["detail"] = part.detail
        return {"type": "image_url", "image_url": image_url}
    raise TypeError(f"지원하지 않는 메시지 파트: {type(part).__name__}")
