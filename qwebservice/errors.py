# -*- coding: utf-8 -*-
# qwebservice/errors.py
"""
异常定义
内部抛出，在组件边界（WsdlReader.parse / Invocation 工作线程）被捕获并转换为错误状态
"""


class WebServiceError(Exception):
    """所有 qwebservice 异常的基类"""


class DocumentError(WebServiceError):
    """WSDL 文档无法读取、下载或结构不符合要求"""


class TransportError(WebServiceError):
    """HTTP 层错误（连接失败、超时、4xx/5xx）"""


class ConfigurationError(WebServiceError, ValueError):
    """无效的配置输入，例如无法识别的 HTTP 方法字符串"""
