"""
감정 분석 HTTP 서버. POST /api/analyze-emotion JSON, / 브라우저 페이지.
실행: emotion-analyzer (src/server/run.py) 또는 uvicorn src.server.app:create_app --factory
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel, ValidationError

from src.ai import (
    EmotionGatewayClient,
    GatewayError,
    GatewaySettings,
    InputMode,
    load_settings,
)
from src.ai.normalizer import STAGE_FALLBACK
from src.server.page import INDEX_HTML

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze-emotion"


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORS preflight에 본문 없는 응답 (기본 CORSMiddleware는 "OK" 본문)."""

    def preflight_response(self, request_headers) -> Response:
        response = super().preflight_response(request_headers)
        headers = {
            k: v for k, v in response.headers.items()
            if k not in ("content-length", "content-type")
        }
        return Response(status_code=response.status_code, headers=headers)


class AnalyzeRequest(BaseModel):
    mode: InputMode
    input: str


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _get_gateway(app: FastAPI) -> Any:
    """첫 요청 때 클라이언트 생성. API 키가 없으면 GatewayConfigError (요청마다 500)."""
    gateway = app.state.gateway
    if gateway is None:
        gateway = EmotionGatewayClient(app.state.settings)
        app.state.gateway = gateway
    return gateway


def create_app(
    settings: Optional[GatewaySettings] = None,
    client: Optional[Any] = None,
) -> FastAPI:
    """
    FastAPI 앱 생성.

    Args:
        settings: 게이트웨이 설정 (생략 시 환경 변수)
        client: analyze_with_stage(mode, input)를 가진 게이트웨이 클라이언트 (테스트용 주입)
    """
    app = FastAPI(title="Emotion Analyzer", docs_url=None, redoc_url=None)
    app.add_middleware(
        EmptyPreflightCORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.state.settings = settings if settings is not None else load_settings()
    app.state.gateway = client
    app.state.stats = {"total": 0, "fallback": 0}

    @app.options(ANALYZE_PATH)
    def analyze_preflight():
        """CORS 헤더 없는 단순 OPTIONS에도 빈 200."""
        return Response(status_code=200)

    @app.post(ANALYZE_PATH)
    async def analyze_emotion(request: Request):
        """{mode, input} → AnalysisResult JSON. 429/402는 그대로, 나머지 실패는 500."""
        try:
            body = await request.json()
            req = AnalyzeRequest.model_validate(body)
            gateway = _get_gateway(app)
            result, stage = await asyncio.to_thread(gateway.analyze_with_stage, req.mode, req.input)
            response = JSONResponse(result.to_dict())
        except GatewayError as e:
            if e.status_code >= 500:
                logger.error("analyze-emotion 실패: %s", e)
            return _error_response(e.status_code, str(e))
        except ValidationError as e:
            logger.warning("잘못된 요청 본문: %s", e.errors(include_input=False))
            return _error_response(500, f"Invalid request body: {e.error_count()} validation error(s)")
        except ValueError as e:
            logger.warning("잘못된 요청: %s", e)
            return _error_response(500, str(e) or "Invalid request")
        except Exception as e:
            logger.exception("analyze-emotion 처리 중 오류: %s", e)
            return _error_response(500, str(e) or "Unknown error")

        stats = app.state.stats
        stats["total"] += 1
        if stage == STAGE_FALLBACK:
            stats["fallback"] += 1
        return response

    @app.get("/api/stats")
    def get_stats():
        """정규화 fallback 비율 (프로세스 기동 이후 누적)."""
        stats = app.state.stats
        total = stats["total"]
        fallback = stats["fallback"]
        return JSONResponse({
            "total": total,
            "fallback": fallback,
            "fallback_rate": (fallback / total) if total else 0.0,
        })

    @app.get("/", response_class=HTMLResponse)
    def index_page():
        """텍스트/음성/웹캠 입력 페이지."""
        return HTMLResponse(INDEX_HTML)

    return app
