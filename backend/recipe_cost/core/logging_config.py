# 루트 로거 설정 — 앱 생성 시 1회
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """콘솔 핸들러를 루트 로거에 붙인다. 이미 핸들러가 있으면 건드리지 않음."""
    logger = logging.getLogger()
    if logger.handlers:
        # 테스트/리로드로 create_app이 여러 번 불려도 중복 출력 방지
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
