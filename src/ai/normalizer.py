"""
LLM 응답 정규화
모델에게 JSON만 달라고 해도 코드펜스·설명문·깨진 텍스트가 섞여 올 수 있으므로
원문 문자열에서 AnalysisResult 하나를 복구한다. 어떤 입력이든 예외 없이 결과를 반환.

순서: 그대로 파싱 → 펜스 제거/중괄호 짝 추출 → 백틱 제거 후 재시도 → 고정 기본값.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Tuple

from .models import AnalysisResult, fallback_result

logger = logging.getLogger(__name__)

# fallback 경고 로그에 남길 원문 최대 길이
LOG_SAMPLE_CHARS = 120

STAGE_DIRECT = "direct"
STAGE_EXTRACTED = "extracted"
STAGE_CLEANED = "cleaned"
STAGE_FALLBACK = "fallback"

_OPEN_FENCE_RE = re.compile(r"^(`{3,})[ \t]*([A-Za-z0-9_+-]*)[ \t]*")


def _try_parse_object(text: str) -> Optional[dict]:
    """JSON 객체(dict)로 파싱되면 반환, 아니면 None."""
    if not text:
        return None
    try:
        data = json.loads(text)
    except (ValueError, TypeError, RecursionError):
        return None
    if not isinstance(data, dict):
        return None
    return data


def _strip_fence(text: str) -> str:
    """```json ... ``` 블록에서 여는 펜스(언어 태그 포함)와 짝 맞는 닫는 펜스 사이만 남김."""
    m = _OPEN_FENCE_RE.match(text)
    if m is None:
        return text
    fence = m.group(1)
    tag = m.group(2)
    rest = text[m.end():]
    # 태그 뒤에 줄바꿈 없이 내용이 이어지면 태그가 아니라 본문
    if tag and tag.lower() != "json" and not rest.startswith(("\n", "\r")):
        rest = text[len(fence):]

    # 닫는 펜스: 뒤쪽에 중괄호가 없거나, 앞 줄이 '}'로 끝나는 첫 펜스 줄.
    # 그 외 중간에 남은 펜스는 백틱 제거 단계에서 처리
    lines = rest.splitlines()
    last_brace = -1
    for i, line in enumerate(lines):
        if "{" in line or "}" in line:
            last_brace = i
    close = None
    prev = ""
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped and set(stripped) == {"`"}:
            if len(stripped) >= len(fence) and (i > last_brace or prev.endswith("}")):
                close = i
                break
        elif stripped:
            prev = stripped
    if close is not None:
        lines = lines[:close]
    elif lines and lines[-1].rstrip().endswith(fence):
        lines[-1] = lines[-1].rstrip()[: -len(fence)]
    return "\n".join(lines).strip()


def _balanced_object(text: str) -> Optional[str]:
    """첫 '{'부터 깊이를 세어 짝이 맞는 '}'까지 잘라 반환. 짝이 없으면 None."""
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def extract_json_candidate(text: str) -> str:
    """원문에서 JSON 후보 문자열을 뽑는다 (펜스 제거 → 중괄호 짝 → 탐욕 정규식 → 백틱 제거)."""
    t = (text or "").strip()
    if t.startswith("```"):
        return _strip_fence(t)

    balanced = _balanced_object(t)
    if balanced is not None:
        return balanced

    # 짝이 안 맞으면 첫 '{' ~ 마지막 '}' (탐욕 매칭과 동일, 긴 입력에서도 선형)
    beg, end = t.find("{"), t.rfind("}")
    if beg != -1 and end > beg:
        return t[beg : end + 1]
    return t.replace("`", "").strip()


def parse_analysis(raw_text: Any) -> Tuple[AnalysisResult, str]:
    """정규화 결과와 성공한 단계(direct/extracted/cleaned/fallback)를 함께 반환."""
    text = raw_text if isinstance(raw_text, str) else ""

    data = _try_parse_object(text)
    if data is not None:
        return AnalysisResult.from_dict(data), STAGE_DIRECT

    candidate = extract_json_candidate(text)
    data = _try_parse_object(candidate)
    if data is not None:
        logger.debug("JSON 추출 후 파싱 성공 (raw_len=%d)", len(text))
        return AnalysisResult.from_dict(data), STAGE_EXTRACTED

    cleaned = candidate.replace("`", "").strip()
    data = _try_parse_object(cleaned)
    if data is not None:
        logger.debug("백틱 제거 후 파싱 성공 (raw_len=%d)", len(text))
        return AnalysisResult.from_dict(data), STAGE_CLEANED

    logger.warning(
        "AI 응답 JSON 파싱 실패, Neutral 기본값 사용: raw_len=%d, sample=%r",
        len(text),
        text[:LOG_SAMPLE_CHARS],
    )
    return fallback_result(), STAGE_FALLBACK


def normalize(raw_text: str) -> AnalysisResult:
    """
    모델 원문을 AnalysisResult로 복구합니다. 절대 예외를 던지지 않습니다.

    Args:
        raw_text: 게이트웨이 응답에서 꺼낸 message content 문자열

    Returns:
        AnalysisResult (복구 불가 시 Neutral/0.0 기본값)
    """
    result, _stage = parse_analysis(raw_text)
    return result
