# -*- coding: utf-8 -*-
# qwebservice/__init__.py
"""
qwebservice 模块初始化文件
提供 WSDL 来源检测和工厂函数
"""

from typing import Any, Dict, Optional, Union
from qwebservice.base import Transport
from qwebservice.errors import ConfigurationError, DocumentError, TransportError, WebServiceError
from qwebservice.method import Invocation, ReplyState, WebMethod
from qwebservice.model import Field, Method, ServiceModel
from qwebservice.pairing import PairingStrategy, TruncationPairing
from qwebservice.serializers import HttpVerb, WireProtocol
from qwebservice.util import is_local_file, is_url
from qwebservice.wsdl import WsdlReader
from qwebservice.wsdl_types import ListOf, ValueKind, map_type

__version__ = "1.0.0"


def detect_source(source: str) -> str:
    """
    检测 WSDL 来源类型

    Args:
        source: 本地文件路径或 URL

    Returns:
        "file" 或 "url"（先检查本地文件是否存在，再检查 URL 是否有效）

    Raises:
        ValueError: 既不是已存在的文件也不是有效的 URL
    """
    if is_local_file(source):
        return "file"
    if is_url(source):
        return "url"
    raise ValueError(f"无法识别的 WSDL 来源（文件不存在且不是有效的URL）: {source}")


def create_reader(source: str, proxy: Optional[str] = None, timeout: float = 30,
                  extra_headers: Optional[Dict[str, str]] = None,
                  show_progress: bool = False) -> WsdlReader:
    """
    工厂函数：创建传输层并解析 WSDL

    解析失败不会抛出异常，调用方通过 is_error_state() / get_error_info() 检查
    """
    transport = Transport(proxy=proxy, timeout=timeout, extra_headers=extra_headers)
    return WsdlReader(source, transport=transport, show_progress=show_progress)


def send_message(url: str, method_name: str, target_namespace: str = "",
                 parameters: Optional[Dict[str, Any]] = None,
                 protocol: Union[WireProtocol, str] = WireProtocol.SOAP12,
                 http_method: Union[HttpVerb, str] = HttpVerb.POST,
                 transport: Optional[Transport] = None,
                 timeout: Optional[float] = None) -> bytes:
    """同步调用，见 WebMethod.send_message"""
    return WebMethod.send_message(url, method_name, target_namespace, parameters,
                                  protocol, http_method, transport, timeout)


__all__ = [
    "ConfigurationError", "DocumentError", "Field", "HttpVerb", "Invocation", "ListOf",
    "Method", "PairingStrategy", "ReplyState", "ServiceModel", "Transport", "TransportError",
    "TruncationPairing", "ValueKind", "WebMethod", "WebServiceError", "WireProtocol",
    "WsdlReader", "create_reader", "detect_source", "map_type", "send_message",
]
