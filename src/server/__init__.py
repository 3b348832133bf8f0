"""
감정 분석 HTTP 서버.

- create_app(): FastAPI 앱 (POST /api/analyze-emotion, GET /api/stats, GET /)
- 브라우저에서 http://127.0.0.1:8787/ 접속.
"""

from src.server.app import create_app

__all__ = ["create_app"]
