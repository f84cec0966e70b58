import csv
from unittest.mock import patch

import requests

from conftest import make_response, make_wsdl
from WsdlClient import WsdlClient, main
from qwebservice import WsdlReader
from qwebservice.wsdl_types import ValueKind


def test_list_methods(currency_wsdl, capsys):
    assert main(["-w", currency_wsdl, "-l"]) == 0

    out = capsys.readouterr().out
    assert "Namespace: http://x/" in out
    assert "Host:      http://x/svc.asmx" in out
    assert "getProviderList" in out
    assert "(symbol: string) -> (symbol: string)" in out


def test_bad_wsdl_path(tmp_path, capsys):
    assert main(["-w", str(tmp_path / "missing.asmx")]) == 1
    assert "does not exist" in capsys.readouterr().out


def test_invoke_one_method(currency_wsdl, capsys):
    with patch("qwebservice.base.requests.request",
               return_value=make_response(content=b"<rate>9.5</rate>")) as request:
        code = main(["-w", currency_wsdl, "-m", "getProviderList", "--param", "symbol=NOK",
                     "--protocol", "soap10", "-X", "post"])

    assert code == 0
    assert "<rate>9.5</rate>" in capsys.readouterr().out
    kwargs = request.call_args.kwargs
    assert kwargs["headers"]["SOAPAction"] == '"http://x/getProviderList"'
    assert b"<symbol>NOK</symbol>" in kwargs["data"]


def test_invoke_unknown_method(currency_wsdl):
    assert main(["-w", currency_wsdl, "-m", "noSuchMethod"]) == 1


def test_invoke_one_reports_failure(currency_wsdl, capsys):
    with patch("qwebservice.base.requests.request",
               side_effect=requests.exceptions.ConnectionError("Connection refused")):
        assert main(["-w", currency_wsdl, "-m", "getProviderList"]) == 1
    assert "Connection refused" in capsys.readouterr().out


def test_invoke_one_rejects_bad_parameter_name(currency_wsdl):
    with patch("qwebservice.base.requests.request") as request:
        assert main(["-w", currency_wsdl, "-m", "getProviderList", "--param", "a b=1"]) == 1
    request.assert_not_called()


def test_invoke_all_writes_report(currency_wsdl, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with patch("qwebservice.base.requests.request",
               return_value=make_response(content=b"<ok/>")):
        assert main(["-w", currency_wsdl, "-a", "-t", "2"]) == 0

    reports = list(tmp_path.glob("wsdl_client_*.csv"))
    assert len(reports) == 1
    with open(reports[0], encoding="utf-8-sig") as f:
        rows = list(csv.reader(f))
    assert rows[0][:4] == ["HTTP Method", "Method", "URL", "Status"]
    assert rows[1][:4] == ["POST", "getProviderList", "http://x/svc.asmx", "200"]


def test_build_parameters(write_wsdl):
    path = write_wsdl(make_wsdl([("Add", [("a", "s:int"), ("b", "s:int")]), ("AddResponse", [])]))
    client = WsdlClient(WsdlReader(path))
    method = client.reader.get_methods()["Add"]

    params = client.build_parameters(method, {"a": "2", "b": "x", "c": "3"})
    assert params == {"a": 2, "b": "x", "c": "3"}
    assert [f.kind for f in method.parameters] == [ValueKind.INT, ValueKind.INT]
