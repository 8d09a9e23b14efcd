"""
Tests for the Braspress carrier integration.

This module contains test cases for:
- Credential validation and host selection
- Volume validation and manifest totals
- Request body assembly
- Error rendering
"""

import base64
import json
import logging
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import requests

from freightscout import settings

from .exceptions import (
    BraspressAPIError,
    BraspressConnectionError,
    BraspressError,
    BraspressValidationError,
)
from .integration import BraspressClient, log_request_details, xml_to_dict
from .manifest import CargoManifest, validate_positive_number

SHIPMENT = {
    "cnpjRemetente": "12345678000100",
    "cnpjDestinatario": "09876543210001",
    "tipoFrete": "1",
    "cepOrigem": "12345000",
    "cepDestino": "54321000",
    "vlrMercadoria": 500.00,
}

MOCK_QUOTATION_RESPONSE = {"id": 98765, "prazo": 3, "totalFrete": 152.37}


@pytest.fixture
def client():
    """Create a Braspress client instance for testing."""
    return BraspressClient("usuario", "senha", production=True)


@pytest.fixture
def mock_response():
    """Create a mock response object."""
    mock = MagicMock()
    mock.status_code = 200
    mock.reason = "OK"
    mock.text = '{"id": 98765, "prazo": 3, "totalFrete": 152.37}'
    mock.json.return_value = MOCK_QUOTATION_RESPONSE
    return mock


def test_init(client):
    """Test client initialization."""
    assert client.name == "braspress"
    assert client.base_url == "https://api.braspress.com"
    assert client.volume_count == 0
    expected = base64.b64encode(b"usuario:senha").decode("ascii")
    assert client.authorization_header == f"Basic {expected}"


def test_init_homologation():
    client = BraspressClient("usuario", "senha", production=False)
    assert client.base_url == "https://api-homologacao.braspress.com"


@pytest.mark.parametrize("username, password", [
    ("", "senha"),
    ("usuario", ""),
    (123, "senha"),
    ("usuario", ["senha"]),
])
def test_init_rejects_bad_credentials(username, password):
    with pytest.raises(BraspressValidationError):
        BraspressClient(username, password)


def test_carrier_identity(client):
    assert client.get_carrier_id() == "BRASPRESS"
    assert client.get_display_name() == "Braspress"


@pytest.mark.parametrize("weight", [0, -1, -0.5, "abc", None, True, float("nan"), float("inf")])
def test_add_volume_rejects_bad_weight(client, weight):
    """Test weight validation leaves the manifest untouched."""
    client.add_volume(1.0, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})
    with pytest.raises(BraspressValidationError):
        client.add_volume(weight, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})
    assert client.volume_count == 1


@pytest.mark.parametrize("dimensions", [
    {},
    {"comprimento": 0.1, "largura": 0.1},
    {"comprimento": 0.1, "largura": 0.1, "altura": 0},
    {"comprimento": -0.2, "largura": 0.1, "altura": 0.1},
    {"comprimento": 0.1, "largura": "wide", "altura": 0.1},
    {"comprimento": 0.1, "largura": 0.1, "altura": None},
])
def test_add_volume_rejects_bad_dimensions(client, dimensions):
    with pytest.raises(BraspressValidationError):
        client.add_volume(2.0, dimensions)
    assert client.volume_count == 0


def test_add_volume_rejects_non_mapping_dimensions(client):
    with pytest.raises(BraspressValidationError):
        client.add_volume(2.0, [0.1, 0.1, 0.1])


def test_add_volume_accepts_numeric_strings_and_decimals(client):
    volume = client.add_volume("2.5", {"comprimento": Decimal("0.40"), "largura": "0.3", "altura": 1})
    assert volume.peso == 2.5
    assert volume.comprimento == pytest.approx(0.40)
    assert volume.largura == pytest.approx(0.3)
    assert volume.altura == 1.0


def test_validate_positive_number():
    assert validate_positive_number(3, "weight") == 3.0
    with pytest.raises(BraspressValidationError):
        validate_positive_number(object(), "weight")


def test_manifest_totals():
    manifest = CargoManifest()
    manifest.add(5.5, {"comprimento": 0.67, "largura": 0.67, "altura": 0.46})
    manifest.add(2.3, {"comprimento": 0.45, "largura": 0.30, "altura": 0.20})

    assert len(manifest) == 2
    assert manifest.total_weight == pytest.approx(7.8)
    assert manifest.cubage() == [
        {"comprimento": 0.67, "largura": 0.67, "altura": 0.46, "volumes": 1},
        {"comprimento": 0.45, "largura": 0.30, "altura": 0.20, "volumes": 1},
    ]

    manifest.clear()
    assert manifest.count == 0
    assert manifest.total_weight == 0


def test_build_request_body_does_not_mutate_input(client):
    client.add_volume(5.5, {"comprimento": 0.67, "largura": 0.67, "altura": 0.46})
    shipment = dict(SHIPMENT)

    body = client.build_request_body(shipment, "A")

    assert shipment == SHIPMENT
    assert body["modal"] == "A"
    assert body["peso"] == 5.5
    assert body["volumes"] == 1
    assert body["cubagem"] == [{"comprimento": 0.67, "largura": 0.67, "altura": 0.46, "volumes": 1}]
    assert body["cepDestino"] == "54321000"


def test_request_quotation(client, mock_response):
    """Test a single road quotation."""
    client.add_volume(5.5, {"comprimento": 0.67, "largura": 0.67, "altura": 0.46})
    with patch("requests.post", return_value=mock_response) as mock_post:
        result = client.request_quotation(SHIPMENT)

    assert result == {"Rodoviario": MOCK_QUOTATION_RESPONSE}
    args, kwargs = mock_post.call_args
    assert args[0] == "https://api.braspress.com/v1/cotacao/calcular/json"
    assert json.loads(kwargs["data"])["modal"] == "R"
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert kwargs["headers"]["Authorization"] == client.authorization_header


def test_request_quotation_recomputes_from_live_manifest(client, mock_response):
    """Volumes added between quotations are reflected in the next call."""
    client.add_volume(1.0, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})
    with patch("requests.post", return_value=mock_response) as mock_post:
        client.request_quotation(SHIPMENT)
        client.add_volume(2.0, {"comprimento": 0.2, "largura": 0.2, "altura": 0.2})
        client.request_quotation(SHIPMENT)

    first, second = [json.loads(c.kwargs["data"]) for c in mock_post.call_args_list]
    assert (first["peso"], first["volumes"]) == (1.0, 1)
    assert (second["peso"], second["volumes"]) == (3.0, 2)
    assert client.volume_count == 2


@pytest.mark.parametrize("modalities", ["X", ["R", "X"], ["r"], [], [None]])
def test_request_quotation_invalid_modality(client, modalities):
    client.add_volume(1.0, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})
    with patch("requests.post") as mock_post:
        with pytest.raises(BraspressValidationError):
            client.request_quotation(SHIPMENT, "json", modalities)
    mock_post.assert_not_called()


def test_request_quotation_invalid_format(client):
    client.add_volume(1.0, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})
    with patch("requests.post") as mock_post:
        with pytest.raises(BraspressValidationError):
            client.request_quotation(SHIPMENT, "csv")
    mock_post.assert_not_called()


def test_request_quotation_without_volumes(client):
    with patch("requests.post") as mock_post:
        with pytest.raises(BraspressValidationError):
            client.request_quotation(SHIPMENT)
    mock_post.assert_not_called()


def test_connection_error(client):
    client.add_volume(1.0, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})
    with patch("requests.post", side_effect=requests.exceptions.ConnectionError("connection refused")):
        with pytest.raises(BraspressConnectionError) as exc_info:
            client.request_quotation(SHIPMENT)

    assert "connection refused" in exc_info.value.message
    assert exc_info.value.http_status is None
    assert exc_info.value.raw_response is None


def test_invalid_json_response(client):
    client.add_volume(1.0, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})
    bad = MagicMock()
    bad.status_code = 200
    bad.text = "not json"
    bad.json.side_effect = ValueError("Expecting value")
    with patch("requests.post", return_value=bad):
        with pytest.raises(BraspressConnectionError, match="invalid response"):
            client.request_quotation(SHIPMENT)


def test_xml_to_dict():
    import xml.etree.ElementTree as ET

    root = ET.fromstring(
        "<cotacao><id>1</id><prazo> 3 </prazo><item>a</item><item>b</item><sub><x>y</x></sub></cotacao>"
    )
    assert xml_to_dict(root) == {"id": "1", "prazo": "3", "item": ["a", "b"], "sub": {"x": "y"}}


def test_xml_to_dict_keeps_attributes_and_mixed_text():
    import xml.etree.ElementTree as ET

    root = ET.fromstring(
        '<cotacao status="ok">aviso<valor moeda="BRL">10.5</valor><id>1</id></cotacao>'
    )
    assert xml_to_dict(root) == {
        "@status": "ok",
        "#text": "aviso",
        "valor": {"@moeda": "BRL", "#text": "10.5"},
        "id": "1",
    }


def test_error_string_rendering():
    """Test the diagnostic rendering of each error kind."""
    api_error = BraspressAPIError("Error requesting quotation.", http_status=401, raw_response="Unauthorized")
    rendered = str(api_error)
    assert rendered.startswith("BraspressAPIError: [Braspress]: Error requesting quotation.")
    assert "HTTP Code: 401" in rendered
    assert "Response: Unauthorized" in rendered

    structured = BraspressError("boom", raw_response={"erro": "CEP inválido"})
    assert 'Response: {"erro": "CEP inválido"}' in str(structured)

    validation = BraspressValidationError("Invalid weight: 0")
    assert validation.http_status is None
    assert validation.raw_response is None
    assert isinstance(validation, BraspressError)


def test_standardize_response(client):
    row = client.standardize_response("Aereo", {"id": 7, "prazo": "2", "totalFrete": "1.234,56"})
    assert row["modality"] == "Aereo"
    assert row["quote_id"] == 7
    assert row["lead_time_days"] == 2.0
    assert row["total_freight"] == pytest.approx(1234.56)

    wrapped = client.standardize_response("Rodoviario", {"cotacao": {"id": "9", "totalFrete": "10.5"}})
    assert wrapped["quote_id"] == "9"
    assert wrapped["total_freight"] == 10.5
    assert wrapped["lead_time_days"] is None


def test_request_quotation_encodes_decimal_values(client, mock_response):
    client.add_volume(Decimal("1.5"), {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})
    shipment = dict(SHIPMENT, vlrMercadoria=Decimal("500.25"))
    with patch("requests.post", return_value=mock_response) as mock_post:
        client.request_quotation(shipment)

    body = json.loads(mock_post.call_args.kwargs["data"])
    assert body["vlrMercadoria"] == 500.25
    assert body["peso"] == 1.5


@pytest.mark.parametrize("value", [object(), {1, 2}, Decimal("NaN"), float("inf")])
def test_request_quotation_rejects_unserializable_shipment(client, value):
    client.add_volume(1.0, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})
    with patch("requests.post") as mock_post:
        with pytest.raises(BraspressValidationError, match="Invalid shipment data"):
            client.request_quotation(dict(SHIPMENT, extra=value), "json", ["R", "A"])
    mock_post.assert_not_called()


def test_credentials_and_environment_from_settings(monkeypatch):
    """A bare client picks up credentials and the homologation host from settings."""
    monkeypatch.setattr(settings, "BRASPRESS_USERNAME", "env-user")
    monkeypatch.setattr(settings, "BRASPRESS_PASSWORD", "env-pass")
    monkeypatch.setattr(settings, "BRASPRESS_PRODUCTION", settings.is_production("homologacao"))

    client = BraspressClient()

    assert client.username == "env-user"
    assert client.production is False
    assert client.base_url == "https://api-homologacao.braspress.com"
    expected = base64.b64encode(b"env-user:env-pass").decode("ascii")
    assert client.authorization_header == f"Basic {expected}"


@pytest.mark.parametrize("environment, expected", [
    ("homologacao", False),
    (" HOMOLOGACAO ", False),
    ("production", True),
    ("", True),
    (None, True),
])
def test_is_production(environment, expected):
    assert settings.is_production(environment) is expected


def test_timeout_from_settings_is_forwarded(monkeypatch, mock_response):
    monkeypatch.setattr(settings, "BRASPRESS_TIMEOUT", 12.5)
    client = BraspressClient("usuario", "senha")
    client.add_volume(1.0, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})

    with patch("requests.post", return_value=mock_response) as mock_post:
        client.request_quotation(SHIPMENT)

    assert mock_post.call_args.kwargs["timeout"] == 12.5


def test_explicit_timeout_overrides_settings(monkeypatch, mock_response):
    monkeypatch.setattr(settings, "BRASPRESS_TIMEOUT", 12.5)
    client = BraspressClient("usuario", "senha", timeout=3)
    client.add_volume(1.0, {"comprimento": 0.1, "largura": 0.1, "altura": 0.1})

    with patch("requests.post", return_value=mock_response) as mock_post:
        client.request_quotation(SHIPMENT)

    assert mock_post.call_args.kwargs["timeout"] == 3


def test_parse_timeout(caplog):
    assert settings.parse_timeout("30") == 30.0
    assert settings.parse_timeout("") is None
    assert settings.parse_timeout(None) is None

    with caplog.at_level(logging.WARNING):
        assert settings.parse_timeout("soon") is None
    assert "Ignoring invalid BRASPRESS_TIMEOUT" in caplog.text


def test_request_log_masks_authorization(client, caplog):
    test_logger = logging.getLogger("braspress_tests.requests")
    headers = {"Content-Type": "application/json", "Authorization": client.authorization_header}

    with caplog.at_level(logging.DEBUG, logger="braspress_tests.requests"):
        log_request_details(test_logger, "POST", "https://api.braspress.com/x", headers, data={"peso": 1.0})

    token = client.authorization_header.split()[1]
    assert "***MASKED***" in caplog.text
    assert token not in caplog.text
    assert headers["Authorization"] == client.authorization_header
