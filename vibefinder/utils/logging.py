"""
VibeFinder Logging Configuration
로깅 설정
"""

import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """루트 로거 설정 (stdout 핸들러)"""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    # 업스트림 요청 URL에 API 키가 포함되므로 httpx 요청 로그는 WARNING 이상만
    logging.getLogger("httpx").setLevel(logging.WARNING)
