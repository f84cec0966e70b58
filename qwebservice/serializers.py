# -*- coding: utf-8 -*-
# qwebservice/serializers.py
"""
消息序列化
每种协议一个序列化函数，通过 SERIALIZERS 分发表选择；
build_request() 负责按 HTTP 方法和 REST 标志决定参数放在请求体还是查询串
"""

import json
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode
from xml.sax.saxutils import escape, quoteattr


class WireProtocol(Enum):
    HTTP = "http"
    SOAP10 = "soap10"
    SOAP12 = "soap12"
    JSON = "json"
    XML = "xml"


class HttpVerb(Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


# 带请求体的 HTTP 方法
BODY_VERBS = (HttpVerb.POST, HttpVerb.PUT)

XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
XSD_NS = "http://www.w3.org/2001/XMLSchema"

# 协议 -> (信封前缀, 信封命名空间)
SOAP_ENVELOPES = {
    WireProtocol.SOAP10: ("soap", "http://schemas.xmlsoap.org/soap/envelope/"),
    WireProtocol.SOAP12: ("soap12", "http://www.w3.org/2003/05/soap-envelope"),
}

DEFAULT_PREFIX = "tns"
RESERVED_PREFIXES = ("soap", "soap12", "xsi", "xsd")
_NCNAME = re.compile(r"^[A-Za-z_][\w.\-]*$")


def to_text(value: Any) -> str:
    """参数值的文本形式"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def is_valid_name(name: Any) -> bool:
    """参数名必须能直接用作 XML 标签名"""
    return isinstance(name, str) and bool(_NCNAME.match(name))


def _xml_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return "".join(f"<item>{escape(to_text(item))}</item>" for item in value)
    return escape(to_text(value))


def _xml_parameters(params: Dict[str, Any]) -> str:
    return "".join(f"<{name}>{_xml_value(value)}</{name}>" for name, value in params.items())


def _query_value(value: Any):
    if isinstance(value, (list, tuple)):
        return [to_text(item) for item in value]
    return to_text(value)


def namespace_prefix(namespace: str) -> str:
    """命名空间本身是合法前缀时直接用作前缀，否则使用 tns"""
    if _NCNAME.match(namespace) and namespace.lower() not in RESERVED_PREFIXES \
            and not namespace.lower().startswith("xml"):
        return namespace
    return DEFAULT_PREFIX


def soap_action(namespace: str, method_name: str) -> str:
    if not namespace:
        return method_name
    if namespace.endswith("/"):
        return namespace + method_name
    return f"{namespace}/{method_name}"


def _serialize_soap(protocol: WireProtocol, method_name: str, namespace: str,
                    params: Dict[str, Any]) -> Tuple[Dict[str, str], str]:
    env_prefix, env_ns = SOAP_ENVELOPES[protocol]

    if namespace:
        prefix = namespace_prefix(namespace)
        ns_decl = f' xmlns:{prefix}={quoteattr(namespace)}'
        tag = f"{prefix}:{method_name}"
    else:
        ns_decl = ""
        tag = method_name

    body = f"""<?xml version="1.0" encoding="utf-8"?>
<{env_prefix}:Envelope xmlns:xsi="{XSI_NS}" xmlns:xsd="{XSD_NS}" xmlns:{env_prefix}="{env_ns}"{ns_decl}>
  <{env_prefix}:Body>
    <{tag}>{_xml_parameters(params)}</{tag}>
  </{env_prefix}:Body>
</{env_prefix}:Envelope>"""

    action = soap_action(namespace, method_name)
    if protocol == WireProtocol.SOAP10:
        headers = {
            'Content-Type': 'text/xml; charset=utf-8',
            'SOAPAction': f'"{action}"'
        }
    else:
        headers = {'Content-Type': f'application/soap+xml; charset=utf-8; action="{action}"'}

    return headers, body


def serialize_soap10(method_name, namespace, params):
    return _serialize_soap(WireProtocol.SOAP10, method_name, namespace, params)


def serialize_soap12(method_name, namespace, params):
    return _serialize_soap(WireProtocol.SOAP12, method_name, namespace, params)


def serialize_json(method_name, namespace, params):
    body = json.dumps(params, default=to_text, ensure_ascii=False)
    return {'Content-Type': 'application/json; charset=utf-8'}, body


def serialize_xml(method_name, namespace, params):
    ns_decl = f' xmlns={quoteattr(namespace)}' if namespace else ""
    body = (f'<?xml version="1.0" encoding="utf-8"?>\n'
            f'<{method_name}{ns_decl}>{_xml_parameters(params)}</{method_name}>')
    return {'Content-Type': 'application/xml; charset=utf-8'}, body


def serialize_http(method_name, namespace, params):
    body = urlencode({name: _query_value(value) for name, value in params.items()}, doseq=True)
    return {'Content-Type': 'application/x-www-form-urlencoded'}, body


# 协议 -> 序列化函数，新增协议时必须在这里登记
SERIALIZERS = {
    WireProtocol.HTTP: serialize_http,
    WireProtocol.SOAP10: serialize_soap10,
    WireProtocol.SOAP12: serialize_soap12,
    WireProtocol.JSON: serialize_json,
    WireProtocol.XML: serialize_xml,
}


def build_request(protocol: WireProtocol, verb: HttpVerb, url: str, method_name: str,
                  namespace: str, params: Dict[str, Any],
                  rest: bool = False) -> Tuple[str, str, Dict[str, str], Dict[str, Any], Optional[str]]:
    """
    准备一次调用的 HTTP 请求

    Returns:
        (HTTP 方法, URL, 请求头, 查询参数, 请求体)
        GET/DELETE 没有请求体，参数放入查询串；REST 模式下参数总是放入查询串
    """
    headers: Dict[str, str] = {}
    query: Dict[str, Any] = {}
    body = None

    if rest or verb not in BODY_VERBS:
        query = {name: _query_value(value) for name, value in params.items()}

    if verb in BODY_VERBS:
        headers, body = SERIALIZERS[protocol](method_name, namespace, params)

    return verb.value, url, headers, query, body
