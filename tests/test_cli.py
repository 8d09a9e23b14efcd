"""
Tests for the FreightScout CLI.
"""

import argparse
import json
import logging

import pytest
import responses

from freightscout import cli, settings

QUOTATION_URL = "https://api.braspress.com/v1/cotacao/calcular/json"

BASE_ARGS = [
    "--username", "usuario",
    "--password", "senha",
    "--volume", "5.5:0.67x0.67x0.46",
    "--volume", "2.3:0.45x0.30x0.20",
    "--cnpj-remetente", "12345678000100",
    "--cnpj-destinatario", "09876543210001",
    "--tipo-frete", "1",
    "--cep-origem", "12345000",
    "--cep-destino", "54321000",
    "--valor-mercadoria", "500",
]


@pytest.fixture(autouse=True)
def production_settings(monkeypatch):
    monkeypatch.setattr(settings, "BRASPRESS_PRODUCTION", True)
    monkeypatch.setattr(settings, "BRASPRESS_USERNAME", "")
    monkeypatch.setattr(settings, "BRASPRESS_PASSWORD", "")
    monkeypatch.setattr(settings, "BRASPRESS_TIMEOUT", None)
    yield
    # main() applies dictConfig; hand the package logger back to the root handlers
    package_logger = logging.getLogger("freightscout")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


def test_parse_volume():
    weight, dims = cli.parse_volume("5.5:0.67x0.67X0.46")
    assert weight == "5.5"
    assert dims == {"comprimento": "0.67", "largura": "0.67", "altura": "0.46"}

    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_volume("5.5-0.67x0.67")


def test_bad_volume_syntax_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--volume", "heavy"])
    assert exc_info.value.code == 2


@responses.activate
def test_table_output(capsys):
    responses.add(responses.POST, QUOTATION_URL, json={"id": 1, "prazo": 5, "totalFrete": 210.45})
    responses.add(responses.POST, QUOTATION_URL, json={"id": 2, "prazo": 1, "totalFrete": 689.9})

    exit_code = cli.main(BASE_ARGS + ["--modal", "R", "--modal", "A"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Rodoviario" in out
    assert "Aereo" in out
    assert "R$ 210.45" in out
    assert "R$ 689.90" in out
    assert "Volumes: 2" in out

    body = json.loads(responses.calls[0].request.body)
    assert body["peso"] == pytest.approx(7.8)
    assert body["vlrMercadoria"] == 500.0
    assert body["cepOrigem"] == "12345000"


@responses.activate
def test_json_output_with_json_logs(capsys):
    responses.add(responses.POST, QUOTATION_URL, json={"id": 1, "prazo": 5, "totalFrete": 210.45})

    exit_code = cli.main(BASE_ARGS + ["--json", "--log-format", "json"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {
        "Rodoviario": {"id": 1, "prazo": 5, "totalFrete": 210.45}
    }


@responses.activate
def test_shipment_file_merged_with_flags(tmp_path, capsys):
    shipment_file = tmp_path / "shipment.json"
    shipment_file.write_text(json.dumps({"cepOrigem": "00000000", "cnpjRemetente": "11111111000111"}))
    responses.add(responses.POST, QUOTATION_URL, json={"id": 1})

    exit_code = cli.main([
        "--username", "usuario", "--password", "senha",
        "--volume", "1:0.1x0.1x0.1",
        "--shipment-file", str(shipment_file),
        "--cep-origem", "12345000",
    ])

    assert exit_code == 0
    body = json.loads(responses.calls[0].request.body)
    assert body["cepOrigem"] == "12345000"
    assert body["cnpjRemetente"] == "11111111000111"


@responses.activate
def test_invalid_volume_value_returns_validation_code(capsys):
    exit_code = cli.main(["--username", "usuario", "--password", "senha", "--volume", "0:0.1x0.1x0.1"])

    assert exit_code == 2
    assert "Invalid weight" in capsys.readouterr().err
    assert len(responses.calls) == 0


def test_missing_credentials(capsys):
    exit_code = cli.main(["--volume", "1:0.1x0.1x0.1"])

    assert exit_code == 2
    assert "Invalid username" in capsys.readouterr().err


@responses.activate
def test_api_error_returns_failure_code(capsys):
    responses.add(responses.POST, QUOTATION_URL, body="Unauthorized", status=401)

    exit_code = cli.main(BASE_ARGS)

    assert exit_code == 1
    err = capsys.readouterr().err
    assert "HTTP Code: 401" in err
    assert "Unauthorized" in err


@pytest.mark.parametrize("content, message", [
    (None, "Cannot read shipment file"),
    ("{not json", "Invalid shipment file"),
    ("[1, 2]", "expected a JSON object"),
])
@responses.activate
def test_bad_shipment_file_returns_validation_code(tmp_path, capsys, content, message):
    shipment_file = tmp_path / "shipment.json"
    if content is not None:
        shipment_file.write_text(content)

    exit_code = cli.main([
        "--username", "usuario", "--password", "senha",
        "--volume", "1:0.1x0.1x0.1",
        "--shipment-file", str(shipment_file),
    ])

    assert exit_code == 2
    assert message in capsys.readouterr().err
    assert len(responses.calls) == 0
