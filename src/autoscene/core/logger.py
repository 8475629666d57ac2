"""
日志配置模块
"""
import sys
from pathlib import Path

from loguru import logger

from .config import settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

_configured = False


def setup_logger(force: bool = False):
    """配置日志系统

    可重复调用：只有首次调用或 force=True 时才会重建处理器。
    """
    global _configured
    if _configured and not force:
        return logger

    # 移除默认处理器及上次安装的处理器
    logger.remove()

    # 控制台输出（无控制台时跳过）
    stream = sys.stdout or sys.stderr
    if settings.log_console_enabled and stream is not None:
        logger.add(stream, level=settings.log_level, format=_CONSOLE_FORMAT)

    # 文件输出
    if settings.log_file_enabled:
        log_dir = Path(settings.log_path)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "autoscene_{time:YYYY-MM-DD}.log",
            level=settings.log_level,
            format=_FILE_FORMAT,
            rotation="00:00",  # 每天午夜轮转
            retention=f"{settings.log_retention_days} days",
            encoding="utf-8",
        )

    _configured = True
    return logger


__all__ = ["logger", "setup_logger"]
