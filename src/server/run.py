"""
감정 분석 서버 실행

.env에 EMOTION_GATEWAY_API_KEY 설정 후 실행.
실행: emotion-analyzer  또는  python -m src.server.run  (프로젝트 루트에서)
브라우저: http://127.0.0.1:8787/  포트 변경 시 .env에 SERVER_PORT=8787 설정.
"""

import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from src.ai import load_settings
from src.ai.config import API_KEY_ENV
from src.server.app import create_app
from src.utils import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8787


def main():
    load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")
    log_dir = setup_logging()

    settings = load_settings()
    if not settings.has_api_key:
        logger.warning("%s가 설정되지 않았습니다. 분석 요청은 500으로 응답합니다.", API_KEY_ENV)

    host = os.environ.get("SERVER_HOST", DEFAULT_HOST)
    port = int(os.environ.get("SERVER_PORT", str(DEFAULT_PORT)))
    logger.info(
        "감정 분석 서버 시작: http://%s:%s (model=%s, logs=%s)",
        host,
        port,
        settings.model,
        log_dir,
    )
    # uvicorn 기본 로깅 설정을 쓰지 않고 setup_logging 핸들러 사용
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
