"""
基础服务类 - 提供通用功能如日志、错误处理、度量等
"""
import logging
from abc import ABC
from typing import Any, Dict, Optional


class BaseService(ABC):
    """所有服务的基类"""

    def __init__(self, service_name: str = None):
        """
        初始化基础服务

        Args:
            service_name: 服务名称，用于日志标识
        """
        self.service_name = service_name or self.__class__.__name__
        self.logger = logging.getLogger(f"stockmerge.services.{self.service_name}")
        self._metrics: Dict[str, Any] = {}

    def log_info(self, message: str, **kwargs) -> None:
        """记录信息日志"""
        self.logger.info(message, extra=kwargs)

    def log_error(self, message: str, error: Optional[Exception] = None, **kwargs) -> None:
        """记录错误日志"""
        self.logger.error(message, exc_info=error, extra=kwargs)

    def log_debug(self, message: str, **kwargs) -> None:
        """记录调试日志"""
        self.logger.debug(message, extra=kwargs)

    def log_warning(self, message: str, **kwargs) -> None:
        """记录警告日志"""
        self.logger.warning(message, extra=kwargs)

    def record_metric(self, metric_name: str, value: Any) -> None:
        """
        记录度量指标

        Args:
            metric_name: 指标名称
            value: 指标值
        """
        self._metrics[metric_name] = value

    def get_metrics(self) -> Dict[str, Any]:
        """获取所有度量指标"""
        return self._metrics.copy()


class ServiceException(Exception):
    """服务层异常基类"""

    status_code: int = 500
    default_code = "service_error"

    def __init__(self, message: str, code: str = None, details: Dict[str, Any] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def to_response_message(self) -> str:
        """返回给调用方的错误描述"""
        return self.message


class InputMissingError(ServiceException):
    """缺少文件、列配置，或所有文件都没有提取到数据"""
    status_code = 400
    default_code = "input_missing"


class MalformedConfigError(ServiceException):
    """列配置不是合法的 JSON 字符串数组"""
    status_code = 400
    default_code = "malformed_config"


class ProcessingFailure(ServiceException):
    """解码 / 合并 / 编码过程中的意外失败"""
    status_code = 500
    default_code = "processing_failed"

    def to_response_message(self) -> str:
        return f"Processing failed: {self.message}"


class WorkbookReadError(ProcessingFailure):
    """工作簿字节无法解析"""
    pass


class WorkbookWriteError(ProcessingFailure):
    """工作簿无法写出"""
    pass
