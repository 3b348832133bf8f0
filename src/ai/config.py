"""
게이트웨이 설정. 환경 변수(.env)에서 읽어 명시적으로 클라이언트/앱에 전달한다.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_TIMEOUT_SEC = 60.0

API_KEY_ENV = "EMOTION_GATEWAY_API_KEY"


@dataclass(frozen=True)
class GatewaySettings:
    """LLM 게이트웨이 접속 정보"""
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout_sec: float = DEFAULT_TIMEOUT_SEC

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def _parse_timeout(value: Optional[str]) -> float:
    if not (value or "").strip():
        return DEFAULT_TIMEOUT_SEC
    try:
        timeout = float(value)
    except ValueError:
        logger.warning("EMOTION_GATEWAY_TIMEOUT_SEC 값이 숫자가 아닙니다(%r). 기본값 %.0f초 사용.", value, DEFAULT_TIMEOUT_SEC)
        return DEFAULT_TIMEOUT_SEC
    if timeout <= 0:
        logger.warning("EMOTION_GATEWAY_TIMEOUT_SEC는 0보다 커야 합니다(%r). 기본값 사용.", value)
        return DEFAULT_TIMEOUT_SEC
    return timeout


def load_settings(env: Optional[Mapping[str, str]] = None) -> GatewaySettings:
    """환경 변수에서 GatewaySettings 생성. env 생략 시 os.environ."""
    env = os.environ if env is None else env
    return GatewaySettings(
        api_key=(env.get(API_KEY_ENV) or "").strip(),
        base_url=(env.get("EMOTION_GATEWAY_BASE_URL") or "").strip() or DEFAULT_BASE_URL,
        model=(env.get("EMOTION_GATEWAY_MODEL") or "").strip() or DEFAULT_MODEL,
        timeout_sec=_parse_timeout(env.get("EMOTION_GATEWAY_TIMEOUT_SEC")),
    )
