import json
import xml.etree.ElementTree as ET
from datetime import datetime
from urllib.parse import parse_qs

import pytest

from qwebservice.serializers import (
    SERIALIZERS, HttpVerb, WireProtocol, build_request, is_valid_name, namespace_prefix, soap_action,
    to_text
)

SOAP11_ENV = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP12_ENV = "http://www.w3.org/2003/05/soap-envelope"


def test_every_protocol_has_a_serializer():
    assert set(SERIALIZERS) == set(WireProtocol)


def test_soap12_body_uses_namespace_as_prefix():
    verb, url, headers, query, body = build_request(
        WireProtocol.SOAP12, HttpVerb.POST, "http://x/svc.asmx", "M", "NS", {"symbol": "NOK"})

    assert verb == "POST"
    assert url == "http://x/svc.asmx"
    assert query == {}
    assert "<NS:M><symbol>NOK</symbol></NS:M>" in body
    assert headers["Content-Type"].startswith("application/soap+xml")

    root = ET.fromstring(body.encode("utf-8"))
    assert root.tag == f"{{{SOAP12_ENV}}}Envelope"
    call = root.find(f"{{{SOAP12_ENV}}}Body/{{NS}}M")
    assert call.find("symbol").text == "NOK"


def test_soap10_envelope_and_action():
    _, _, headers, _, body = build_request(
        WireProtocol.SOAP10, HttpVerb.POST, "http://x/svc.asmx", "getProviderList", "http://x/",
        {"symbol": "NOK"})

    assert headers["Content-Type"] == "text/xml; charset=utf-8"
    assert headers["SOAPAction"] == '"http://x/getProviderList"'
    assert "<tns:getProviderList><symbol>NOK</symbol></tns:getProviderList>" in body

    root = ET.fromstring(body.encode("utf-8"))
    call = root.find(f"{{{SOAP11_ENV}}}Body/{{http://x/}}getProviderList")
    assert call is not None


def test_soap_without_namespace():
    _, _, _, _, body = build_request(WireProtocol.SOAP12, HttpVerb.POST, "u", "Ping", "", {})
    assert "<Ping></Ping>" in body
    ET.fromstring(body.encode("utf-8"))


def test_namespace_prefix():
    assert namespace_prefix("NS") == "NS"
    assert namespace_prefix("http://x/") == "tns"
    assert namespace_prefix("soap") == "tns"
    assert namespace_prefix("xmlThing") == "tns"


def test_soap_action():
    assert soap_action("http://x/", "M") == "http://x/M"
    assert soap_action("urn:calc", "Add") == "urn:calc/Add"
    assert soap_action("", "Add") == "Add"


def test_json_body():
    _, _, headers, query, body = build_request(
        WireProtocol.JSON, HttpVerb.POST, "u", "M", "NS",
        {"a": 1, "b": "x", "flag": True, "when": datetime(2023, 1, 2, 3, 4, 5)})

    assert headers["Content-Type"].startswith("application/json")
    assert query == {}
    assert json.loads(body) == {"a": 1, "b": "x", "flag": True, "when": "2023-01-02T03:04:05"}


def test_xml_body():
    _, _, headers, _, body = build_request(WireProtocol.XML, HttpVerb.PUT, "u", "M", "urn:ns", {"a": 1})

    assert headers["Content-Type"].startswith("application/xml")
    root = ET.fromstring(body.encode("utf-8"))
    assert root.tag == "{urn:ns}M"
    # 参数继承默认命名空间
    assert root.find("{urn:ns}a").text == "1"


def test_http_form_body():
    _, _, headers, _, body = build_request(
        WireProtocol.HTTP, HttpVerb.POST, "u", "M", "", {"symbol": "NOK", "flag": False})

    assert headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert parse_qs(body) == {"symbol": ["NOK"], "flag": ["false"]}


@pytest.mark.parametrize("verb", [HttpVerb.GET, HttpVerb.DELETE])
def test_bodyless_verbs_use_query(verb):
    method, _, headers, query, body = build_request(
        WireProtocol.SOAP12, verb, "http://x/svc", "M", "NS", {"a": 1, "tags": ["x", "y"]})

    assert method == verb.value
    assert body is None
    assert headers == {}
    assert query == {"a": "1", "tags": ["x", "y"]}


def test_rest_adds_query_and_keeps_body():
    _, _, _, query, body = build_request(
        WireProtocol.JSON, HttpVerb.POST, "u", "M", "", {"a": 1}, rest=True)

    assert query == {"a": "1"}
    assert json.loads(body) == {"a": 1}


def test_values_are_escaped():
    _, _, _, _, body = build_request(
        WireProtocol.SOAP12, HttpVerb.POST, "u", "M", "NS", {"q": "a<b & c>d"})

    assert "<q>a&lt;b &amp; c&gt;d</q>" in body
    root = ET.fromstring(body.encode("utf-8"))
    assert root.find(f"{{{SOAP12_ENV}}}Body/{{NS}}M/q").text == "a<b & c>d"


def test_list_values_become_items():
    _, _, _, _, body = build_request(
        WireProtocol.XML, HttpVerb.POST, "u", "M", "", {"tags": ["a", "b"]})
    assert "<tags><item>a</item><item>b</item></tags>" in body


def test_is_valid_name():
    assert is_valid_name("symbol")
    assert is_valid_name("_x.y-z1")
    assert not is_valid_name("a b")
    assert not is_valid_name("1x")
    assert not is_valid_name("")
    assert not is_valid_name(3)


def test_to_text():
    assert to_text(None) == ""
    assert to_text(True) == "true"
    assert to_text(0) == "0"
    assert to_text(datetime(2020, 5, 1)) == "2020-05-01T00:00:00"
