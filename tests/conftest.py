"""
Shared pytest fixtures for all tests.

Provides WSDL document builders and fake HTTP responses.
"""

from unittest.mock import MagicMock

import pytest


def make_wsdl(elements, namespace="http://x/", service="svc", address="http://x/svc.asmx",
              extra_sections=""):
    """
    Build a .NET style WSDL document.

    elements: list of (element name, [(field name, xsd type), ...])
    """
    schema = []
    for name, fields in elements:
        children = "".join(
            f'<s:element minOccurs="0" maxOccurs="1" name="{f}" type="{t}" />' for f, t in fields
        )
        schema.append(
            f'<s:element name="{name}"><s:complexType><s:sequence>{children}'
            f'</s:sequence></s:complexType></s:element>'
        )

    service_xml = ""
    if service is not None:
        address_xml = f'<soap:address location="{address}" />' if address else ""
        service_xml = (
            f'<wsdl:service name="{service}"><wsdl:port name="{service}Soap" binding="tns:{service}Soap">'
            f'{address_xml}</wsdl:port></wsdl:service>'
        )

    return f"""<?xml version="1.0" encoding="utf-8"?>
<wsdl:definitions xmlns:s="http://www.w3.org/2001/XMLSchema"
                  xmlns:soap="http://schemas.xmlsoap.org/wsdl/soap/"
                  xmlns:tns="{namespace}"
                  xmlns:wsdl="http://schemas.xmlsoap.org/wsdl/"
                  targetNamespace="{namespace}">
  <wsdl:types>
    <s:schema elementFormDefault="qualified" targetNamespace="{namespace}">
      {"".join(schema)}
    </s:schema>
  </wsdl:types>
  {extra_sections}
  {service_xml}
</wsdl:definitions>
"""


CURRENCY_WSDL = make_wsdl(
    [
        ("getProviderList", [("symbol", "s:string")]),
        ("getProviderListResponse", [("symbol", "s:string")]),
    ],
    extra_sections="""
  <wsdl:message name="getProviderListSoapIn">
    <wsdl:part name="parameters" element="tns:getProviderList" />
  </wsdl:message>
  <wsdl:message name="getProviderListSoapOut">
    <wsdl:part name="parameters" element="tns:getProviderListResponse" />
  </wsdl:message>
  <wsdl:portType name="svcSoap">
    <wsdl:operation name="getProviderList">
      <wsdl:input message="tns:getProviderListSoapIn" />
      <wsdl:output message="tns:getProviderListSoapOut" />
    </wsdl:operation>
  </wsdl:portType>
  <wsdl:binding name="svcSoap" type="tns:svcSoap">
    <soap:binding transport="http://schemas.xmlsoap.org/soap/http" />
    <wsdl:operation name="getProviderList">
      <soap:operation soapAction="http://x/getProviderList" style="document" />
    </wsdl:operation>
  </wsdl:binding>
""",
)


@pytest.fixture
def write_wsdl(tmp_path):
    """Write a WSDL document to a temporary file and return its path."""
    counter = {"n": 0}

    def _write(content, name=None):
        counter["n"] += 1
        path = tmp_path / (name or f"service{counter['n']}.wsdl")
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def currency_wsdl(write_wsdl):
    return write_wsdl(CURRENCY_WSDL, "currency.asmx")


def make_response(status_code=200, content=b"<ok/>", reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    response.reason = reason
    response._response_time = 0.01
    return response
