from __future__ import annotations
import logging
import sys
from loguru import logger

# uvicorn/aiohttp/asyncio 로그도 loguru로 모음
STDLIB_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "aiohttp", "asyncio")

class InterceptHandler(logging.Handler):
    """stdlib logging 레코드를 loguru로 전달"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).bind(name=record.name).log(
            level, record.getMessage()
        )

def _hook_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in STDLIB_LOGGERS:
        std = logging.getLogger(name)
        std.handlers = [InterceptHandler()]
        std.propagate = False

# 콘솔 포맷 (바인딩된 key=value는 extra로 뒤에 표시)
DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<level>{message}</level> {extra}"
)

def setup_logging_dev(log_level: str = "INFO") -> None:
    """
    개발 콘솔용 loguru 초기화 (컬러 출력 + stdlib 흡수).

    Args:
        log_level: 최소 로그 레벨
    """
    logger.remove()
    logger.configure(extra={"name": "touristsafe"})
    logger.add(
        sys.stderr,
        format=DEV_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,
        level=log_level.upper(),
    )
    _hook_stdlib_logging()

def setup_logging_json(log_level: str = "INFO") -> None:
    """
    운영용 loguru 초기화. 한 줄에 JSON 레코드 하나를 출력합니다.

    Args:
        log_level: 최소 로그 레벨
    """
    logger.remove()
    logger.configure(extra={"name": "touristsafe"})
    logger.add(
        sys.stdout,
        serialize=True,
        backtrace=False,
        diagnose=False,
        level=log_level.upper(),
        enqueue=True,
    )
    _hook_stdlib_logging()

def get_logger(name: str = "touristsafe", **ctx):
    """선택적으로 컨텍스트를 바인딩한 logger 반환."""
    return logger.bind(name=name, **ctx)
