# AI 추론 모듈 (게이트웨이 호출 + 응답 정규화)

from .models import AnalysisResult, InputMode, VALID_EMOTIONS, fallback_result
from .config import GatewaySettings, load_settings
from .normalizer import normalize, parse_analysis
from .gateway_client import (
    EmotionGatewayClient,
    GatewayError,
    GatewayRateLimitError,
    GatewayPaymentRequiredError,
    GatewayConfigError,
    InvalidInputError,
)

__all__ = [
    "AnalysisResult",
    "InputMode",
    "VALID_EMOTIONS",
    "fallback_result",
    "GatewaySettings",
    "load_settings",
    "normalize",
    "parse_analysis",
    "EmotionGatewayClient",
    "GatewayError",
    "GatewayRateLimitError",
    "GatewayPaymentRequiredError",
    "GatewayConfigError",
    "InvalidInputError",
]
