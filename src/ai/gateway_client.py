"""
감정 분석 게이트웨이 클라이언트
입력 모드(TEXT/VOICE/WEBCAM)에 맞춰 chat 요청을 만들고, OpenAI 호환 게이트웨이 응답을
AnalysisResult로 정규화합니다. 재시도는 하지 않습니다.
"""

import json
import logging
import re
from typing import Any, List, Optional, Tuple

import httpx
import openai
from openai import OpenAI

from .config import API_KEY_ENV, GatewaySettings
from .models import (
    AnalysisResult,
    InputMode,
    MediaPart,
    MessagePart,
    TextPart,
    part_to_openai,
)
from .normalizer import parse_analysis

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 4000
# 에러 본문 로그 상한
ERROR_BODY_LOG_CHARS = 300

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
PAYMENT_REQUIRED_MESSAGE = "Payment required. Please add credits to continue."

SYSTEM_PROMPT = """You are an expert emotion analyzer. Analyze the provided input and identify the dominant emotion.
Respond ONLY with a JSON object with these fields:
- emotion: One of: Joy, Sadness, Anger, Surprise, Fear, Disgust, or Neutral
- confidence: Float between 0.0 and 1.0
- explanation: Brief explanation (1-2 sentences)
- emoji: Single emoji representing the emotion
- color: Tailwind CSS color name (e.g., "yellow-400", "blue-500", "red-500").
Do not include markdown code fences or any text outside the JSON object."""

TEXT_INSTRUCTION = 'Analyze the emotion in this text: "{text}"'
VOICE_INSTRUCTION = (
    'Analyze the emotion of the speaker from this transcript of their spoken words, '
    'considering wording, hesitations and emphasis: "{text}"'
)
WEBCAM_INSTRUCTION = "Analyze the emotion shown in this facial expression:"

_IMAGE_DATA_URL_RE = re.compile(r"^data:image/[A-Za-z0-9.+-]+;base64,[A-Za-z0-9+/=\s]+$")


class GatewayError(Exception):
    """게이트웨이 호출 실패. status_code는 엔드포인트가 돌려줄 HTTP 상태."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class GatewayRateLimitError(GatewayError):
    status_code = 429


class GatewayPaymentRequiredError(GatewayError):
    status_code = 402


class GatewayConfigError(GatewayError):
    """API 키 미설정 등 로컬 설정 문제"""


class InvalidInputError(ValueError):
    """요청 mode/input 이 규격에 맞지 않음"""


_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")


def _clean_user_text(text: str, max_len: int = MAX_TEXT_CHARS) -> str:
    """제어 문자를 공백으로 바꾸고 공백을 한 칸으로 줄인 뒤 max_len 자에서 자른다."""
    cleaned = _WHITESPACE_RE.sub(" ", _CONTROL_CHARS_RE.sub(" ", text)).strip()
    if len(cleaned) > max_len:
        logger.debug("입력 텍스트가 길어 잘림: %d자 → %d자", len(cleaned), max_len)
        cleaned = cleaned[:max_len]
    return cleaned


def _coerce_mode(mode: Any) -> InputMode:
    if isinstance(mode, InputMode):
        return mode
    try:
        return InputMode(str(mode or "").strip().upper())
    except ValueError:
        raise InvalidInputError(f"Unsupported mode: {mode!r}") from None


def build_user_parts(mode: Any, user_input: Any) -> List[MessagePart]:
    """모드별 user 턴 파트 목록. 입력이 맞지 않으면 InvalidInputError."""
    mode = _coerce_mode(mode)
    if not isinstance(user_input, str):
        raise InvalidInputError("input must be a string")

    if mode is InputMode.TEXT:
        text = _clean_user_text(user_input)
        if not text:
            raise InvalidInputError("Text input is empty")
        return [TextPart(TEXT_INSTRUCTION.format(text=text))]

    if mode is InputMode.VOICE:
        # 음성은 브라우저(Web Speech API)에서 받아쓴 transcript 텍스트로 받는다
        if user_input.lstrip().startswith("data:"):
            raise InvalidInputError("Voice input must be a transcript, not a data URL")
        text = _clean_user_text(user_input)
        if not text:
            raise InvalidInputError("Voice transcript is empty")
        return [TextPart(VOICE_INSTRUCTION.format(text=text))]

    if mode is InputMode.WEBCAM:
        url = user_input.strip()
        if not _IMAGE_DATA_URL_RE.match(url):
            raise InvalidInputError("Webcam input must be a base64 image data URL")
        return [TextPart(WEBCAM_INSTRUCTION), MediaPart(url)]

    raise InvalidInputError(f"Unsupported mode: {mode!r}")


def build_messages(mode: Any, user_input: Any) -> List[dict]:
    """system 지시문 + user 턴 하나. 파트가 텍스트 하나면 문자열 content로 보냄."""
    parts = build_user_parts(mode, user_input)
    if len(parts) == 1 and isinstance(parts[0], TextPart):
        user_content: Any = parts[0].text
    else:
        user_content = [part_to_openai(p) for p in parts]
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]


def _first_message(response: Any) -> Optional[Any]:
    choices = getattr(response, "choices", None)
    if not choices:
        logger.warning("게이트웨이 응답에 choices가 없음")
        return None
    message = getattr(choices[0], "message", None)
    if message is None:
        logger.warning("게이트웨이 응답의 첫 choice에 message가 없음")
    return message


def extract_content(response: Any) -> str:
    """
    첫 choice의 content 문자열. content가 비어 있으면 tool_calls[0].function.arguments 사용.
    문자열이 아닌 content는 JSON 문자열로 바꾼다.
    """
    msg = _first_message(response)
    if msg is None:
        return ""
    content = getattr(msg, "content", None)
    if not content:
        tool_calls = getattr(msg, "tool_calls", None) or []
        if tool_calls:
            fn = getattr(tool_calls[0], "function", None)
            args = getattr(fn, "arguments", None)
            if args:
                content = args
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    try:
        return json.dumps(content, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(content)


def _error_body_sample(err: openai.APIStatusError) -> str:
    try:
        body = err.response.text
    except Exception:
        body = str(getattr(err, "body", "") or "")
    return (body or "")[:ERROR_BODY_LOG_CHARS]


class EmotionGatewayClient:
    """OpenAI 호환 게이트웨이로 감정 분석 요청. 설정은 GatewaySettings로 주입."""

    def __init__(self, settings: GatewaySettings, client: Optional[Any] = None):
        if not settings.api_key:
            raise GatewayConfigError(f"{API_KEY_ENV} is not configured")
        self.settings = settings
        self.model = settings.model
        self._client = client or OpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=httpx.Timeout(settings.timeout_sec, connect=10.0),
            max_retries=0,
        )
        logger.info(
            "EmotionGatewayClient 초기화 완료: model=%s, base_url=%s, timeout=%.0fs",
            self.model,
            settings.base_url,
            settings.timeout_sec,
        )

    def request_raw(self, mode: Any, user_input: Any) -> str:
        """게이트웨이 호출 후 모델 원문(content) 반환. 실패는 GatewayError 계열로 변환."""
        messages = build_messages(mode, user_input)
        logger.debug("analyze 요청: mode=%s, input_len=%d", _coerce_mode(mode).value, len(user_input))
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
            )
        except openai.APIStatusError as e:
            status = e.status_code
            if status == 429:
                logger.warning("게이트웨이 rate limit (429)")
                raise GatewayRateLimitError(RATE_LIMIT_MESSAGE) from e
            if status == 402:
                logger.warning("게이트웨이 크레딧 부족 (402)")
                raise GatewayPaymentRequiredError(PAYMENT_REQUIRED_MESSAGE) from e
            logger.error("AI gateway error: %s %s", status, _error_body_sample(e))
            raise GatewayError(f"AI gateway error: {status}") from e
        except openai.APIConnectionError as e:
            logger.error("게이트웨이 연결 실패: %s", e)
            raise GatewayError(f"AI gateway connection failed: {e}") from e
        return extract_content(response)

    def analyze_with_stage(self, mode: Any, user_input: Any) -> Tuple[AnalysisResult, str]:
        """분석 결과와 정규화 단계(direct/extracted/cleaned/fallback)."""
        raw = self.request_raw(mode, user_input)
        result, stage = parse_analysis(raw)
        logger.info(
            "감정 분석 완료: emotion=%s, confidence=%.2f, stage=%s",
            result.emotion,
            result.confidence,
            stage,
        )
        return result, stage

    def analyze(self, mode: Any, user_input: Any) -> AnalysisResult:
        """
        입력을 게이트웨이로 보내 감정 분석 결과를 받습니다.

        Args:
            mode: "TEXT" | "VOICE" | "WEBCAM"
            user_input: 텍스트, 음성 transcript, 또는 이미지 data URL

        Returns:
            AnalysisResult (모델 출력이 깨져도 기본값으로 복구)

        Raises:
            InvalidInputError, GatewayError 계열
        """
        result, _stage = self.analyze_with_stage(mode, user_input)
        return result
