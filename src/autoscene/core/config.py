"""
核心配置模块
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """系统配置（可通过环境变量或 .env 覆盖）"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # 检测
    detection_quality: int = Field(default=600, ge=1)
    randomize_actions: bool = Field(default=False)
    template_dir: str = Field(default="./templates")
    template_cache_size: int = Field(default=64, ge=0)

    # 运行器
    frame_interval_ms: int = Field(default=200, ge=0)

    # 线程池（0 = 自动）
    io_thread_pool_size: int = Field(default=0)

    # 日志
    log_level: str = Field(default="INFO")
    log_path: str = Field(default="./logs")
    log_retention_days: int = Field(default=3)
    log_console_enabled: bool = Field(default=True)
    log_file_enabled: bool = Field(default=True)


# 全局配置实例
settings = Settings()
