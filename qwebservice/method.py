# -*- coding: utf-8 -*-
# qwebservice/method.py
"""
Web 方法调用
WebMethod 保存一次远程调用的配置（地址、方法名、命名空间、参数、协议、HTTP 方法），
invoke() 在后台线程发送请求并立即返回，结果通过 Invocation 的就绪标志、wait() 或回调获取；
send_message() 是同步版本，阻塞到收到回复或出错为止
"""

import re
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from .base import Transport
from .errors import ConfigurationError, TransportError
from .model import Method
from .serializers import HttpVerb, WireProtocol, build_request, is_valid_name
from .util import print_error
from .wsdl_types import default_value

# "soap" 默认为 SOAP 1.2
PROTOCOL_ALIASES = {
    "soap": WireProtocol.SOAP12,
    "soap11": WireProtocol.SOAP10,
}


class ReplyState(Enum):
    PENDING = "pending"
    RECEIVED = "received"
    ERROR = "error"


class Invocation:
    """
    一次调用的快照

    状态只会从 PENDING 变为 RECEIVED 或 ERROR 一次，之后不再改变。
    """

    def __init__(self, protocol: WireProtocol, verb: HttpVerb, endpoint: str, namespace: str,
                 method_name: str, parameters: Dict[str, Any], return_fields: Dict[str, Any],
                 rest: bool = False):
        self.protocol = protocol
        self.rest = rest
        self.verb = verb
        self.endpoint = endpoint
        self.namespace = namespace
        self.method_name = method_name
        self.parameters = dict(parameters)
        self.return_fields = dict(return_fields)

        self.status_code: Optional[int] = None
        self.response_time = 0.0
        self._state = ReplyState.PENDING
        self._reply = b""
        self._error = ""
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[["Invocation"], None]] = []

    @property
    def state(self) -> ReplyState:
        return self._state

    @property
    def reply(self) -> bytes:
        return self._reply

    @property
    def error_info(self) -> str:
        return self._error

    def is_ready(self) -> bool:
        # 回调中即为 True，wait() 则要等回调全部执行完才返回
        return self._state != ReplyState.PENDING

    def is_error_state(self) -> bool:
        return self._state == ReplyState.ERROR

    def wait(self, timeout: Optional[float] = None) -> bool:
        """阻塞等待调用结束，超时返回 False"""
        return self._done.wait(timeout)

    def add_done_callback(self, callback: Callable[["Invocation"], None]) -> None:
        with self._lock:
            if self._state == ReplyState.PENDING:
                self._callbacks.append(callback)
                return
        callback(self)

    def prepare_request(self) -> Tuple[str, str, Dict[str, str], Dict[str, Any], Optional[str]]:
        return build_request(self.protocol, self.verb, self.endpoint, self.method_name,
                             self.namespace, self.parameters, self.rest)

    def run(self, transport: Transport) -> None:
        """发送请求并记录结果（在工作线程中执行），不做重试"""
        try:
            method, url, headers, params, body = self.prepare_request()
            response = transport.send_request(method, url, headers, params, body)
        except TransportError as e:
            self._finish(ReplyState.ERROR, str(e).encode("utf-8"), str(e))
            return
        except Exception as e:
            # 线程边界：任何异常都转换为错误状态，避免等待方永远阻塞
            self._finish(ReplyState.ERROR, str(e).encode("utf-8"), f"{type(e).__name__}: {e}")
            return

        self.status_code = response.status_code
        self.response_time = getattr(response, "_response_time", 0.0)
        if response.status_code >= 400:
            self._finish(ReplyState.ERROR, response.content,
                         f"HTTP {response.status_code} {response.reason or ''}".strip())
        else:
            self._finish(ReplyState.RECEIVED, response.content, "")

    def _finish(self, state: ReplyState, reply: bytes, error: str) -> bool:
        with self._lock:
            if self._state != ReplyState.PENDING:
                return False
            self._reply = reply
            self._error = error
            self._state = state
            callbacks, self._callbacks = self._callbacks, []

        # 回调执行完之后 wait() 才返回
        try:
            for callback in callbacks:
                callback(self)
        finally:
            self._done.set()
        return True


class WebMethod:
    """
    远程方法

    可以由 WsdlReader 生成（见 from_method），也可以手工填写地址、方法名和参数。
    字符串形式的 setter 校验输入，失败时返回 False 且不修改当前配置。
    """

    def __init__(self, host: str = "", method_name: str = "", target_namespace: str = "",
                 parameters: Optional[Dict[str, Any]] = None,
                 protocol: Union[WireProtocol, str] = WireProtocol.SOAP12,
                 http_method: Union[HttpVerb, str] = HttpVerb.POST,
                 transport: Optional[Transport] = None, rest: bool = False):
        self.host = host
        self.method_name = method_name
        self.target_namespace = target_namespace
        self.parameters: Dict[str, Any] = {}
        if not self.set_parameters(parameters or {}):
            raise ConfigurationError(f"无效的参数名: {', '.join(map(str, parameters))}")
        self.return_value: Dict[str, Any] = {}
        self.transport = transport or Transport()

        self.protocol = WireProtocol.SOAP12
        self.rest = rest
        self.http_method = HttpVerb.POST
        if not self.set_protocol(protocol):
            raise ConfigurationError(f"无法识别的协议: {protocol}")
        if not self.set_http_method(http_method):
            raise ConfigurationError(f"无法识别的 HTTP 方法: {http_method}")

        # 通知回调
        self.on_reply: List[Callable[[bytes], None]] = []
        self.on_error: List[Callable[[str], None]] = []

        self.invocation: Optional[Invocation] = None

    @classmethod
    def from_method(cls, method: Method, protocol: Union[WireProtocol, str] = WireProtocol.SOAP12,
                    http_method: Union[HttpVerb, str] = HttpVerb.POST,
                    transport: Optional[Transport] = None, rest: bool = False) -> "WebMethod":
        """由 WSDL 中的方法定义创建，参数取各类型的默认值"""
        web_method = cls(method.endpoint, method.name, method.target_namespace,
                         method.parameter_defaults(), protocol, http_method, transport, rest)
        web_method.set_return_value({f.name: default_value(f.kind) for f in method.return_fields})
        return web_method

    # ------------------------------------------------------------------
    # setter

    def set_host(self, host: str) -> None:
        self.host = host

    def set_method_name(self, method_name: str) -> None:
        self.method_name = method_name

    def set_target_namespace(self, target_namespace: str) -> None:
        self.target_namespace = target_namespace

    def set_parameters(self, parameters: Dict[str, Any]) -> bool:
        """参数名会作为 XML 标签名，不合法的名字使整个设置失败"""
        if not all(is_valid_name(name) for name in parameters):
            return False
        self.parameters = dict(parameters)
        return True

    def set_return_value(self, return_value: Dict[str, Any]) -> None:
        self.return_value = dict(return_value)

    def set_rest(self, rest: bool) -> None:
        self.rest = rest

    def set_protocol(self, protocol: Union[WireProtocol, str]) -> bool:
        """
        设置协议

        Args:
            protocol: WireProtocol，或字符串 ("soap12", "json", "xml,rest" ...)，不区分大小写

        Returns:
            是否设置成功；失败时保持原配置
        """
        if isinstance(protocol, WireProtocol):
            self.protocol = protocol
            return True

        if not isinstance(protocol, str):
            return False

        new_protocol = None
        new_rest = self.rest
        recognized = False
        for part in re.split(r"[,|+\s]+", protocol.strip().lower()):
            if not part:
                continue
            recognized = True
            if part == "rest":
                new_rest = True
                continue
            candidate = PROTOCOL_ALIASES.get(part)
            if candidate is None:
                try:
                    candidate = WireProtocol(part)
                except ValueError:
                    return False
            if new_protocol is not None and new_protocol != candidate:
                return False
            new_protocol = candidate

        if not recognized:
            return False

        if new_protocol is not None:
            self.protocol = new_protocol
        self.rest = new_rest
        return True

    def set_http_method(self, http_method: Union[HttpVerb, str]) -> bool:
        """设置 HTTP 方法，字符串不区分大小写（"delete"、"DELETE" 均可）"""
        if isinstance(http_method, HttpVerb):
            self.http_method = http_method
            return True
        if not isinstance(http_method, str):
            return False
        try:
            self.http_method = HttpVerb(http_method.strip().upper())
        except ValueError:
            return False
        return True

    # ------------------------------------------------------------------
    # getter

    def protocol_string(self, include_rest: bool = True) -> str:
        result = self.protocol.value
        if include_rest and self.rest:
            result += ",rest"
        return result

    def http_method_string(self) -> str:
        return self.http_method.value

    def parameter_names(self) -> List[str]:
        return list(self.parameters)

    def return_value_names(self) -> List[str]:
        return list(self.return_value)

    def is_reply_ready(self) -> bool:
        return self.invocation is not None and self.invocation.is_ready()

    def is_error_state(self) -> bool:
        return self.invocation is not None and self.invocation.is_error_state()

    def get_error_info(self) -> str:
        return self.invocation.error_info if self.invocation else ""

    def get_reply(self) -> bytes:
        return self.invocation.reply if self.invocation else b""

    # ------------------------------------------------------------------
    # 调用

    def invoke(self, parameters: Optional[Dict[str, Any]] = None,
               callback: Optional[Callable[[Invocation], None]] = None) -> bool:
        """
        异步发送请求，立即返回

        上一次调用尚未结束，或 parameters 中有不合法的参数名时返回 False。
        在 on_reply / on_error 回调中可以发起下一次调用。
        """
        if self.invocation is not None and not self.invocation.is_ready():
            return False

        if parameters is not None and not self.set_parameters(parameters):
            print_error(f"无效的参数名: {', '.join(map(str, parameters))}")
            return False

        invocation = Invocation(self.protocol, self.http_method, self.host, self.target_namespace,
                                self.method_name, self.parameters, self.return_value, self.rest)
        invocation.add_done_callback(self._invocation_finished)
        if callback:
            invocation.add_done_callback(callback)
        self.invocation = invocation

        t = threading.Thread(target=invocation.run, args=(self.transport,))
        t.daemon = True
        t.start()
        return True

    def wait_for_reply(self, timeout: Optional[float] = None) -> bool:
        if self.invocation is None:
            return False
        return self.invocation.wait(timeout)

    def _invocation_finished(self, invocation: Invocation) -> None:
        if invocation.is_error_state():
            for callback in self.on_error:
                callback(invocation.error_info)
        else:
            for callback in self.on_reply:
                callback(invocation.reply)

    @staticmethod
    def send_message(url: str, method_name: str, target_namespace: str = "",
                     parameters: Optional[Dict[str, Any]] = None,
                     protocol: Union[WireProtocol, str] = WireProtocol.SOAP12,
                     http_method: Union[HttpVerb, str] = HttpVerb.POST,
                     transport: Optional[Transport] = None,
                     timeout: Optional[float] = None) -> bytes:
        """
        同步发送请求，阻塞到收到回复或出错

        Returns:
            服务端回复的原始内容；传输错误或配置无效时为错误信息；超时返回空字节串
        """
        try:
            web_method = WebMethod(url, method_name, target_namespace, parameters,
                                   protocol, http_method, transport)
        except ConfigurationError as e:
            print_error(str(e))
            return str(e).encode("utf-8")
        web_method.invoke()
        if not web_method.wait_for_reply(timeout):
            return b""
        return web_method.get_reply()

    def __repr__(self) -> str:
        return (f"WebMethod({self.method_name!r}, host={self.host!r}, "
                f"protocol={self.protocol_string()!r}, http_method={self.http_method_string()!r})")
