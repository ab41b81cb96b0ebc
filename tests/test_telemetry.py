from marketplace.core import telemetry
from marketplace.core.config import settings


def test_parse_otlp_headers():
    assert telemetry.parse_otlp_headers("") == {}
    assert telemetry.parse_otlp_headers("a=1, b = two ,bad,=x,c=k=v") == {
        "a": "1",
        "b": "two",
        "c": "k=v",
    }


def test_resource_identifies_marketplace_service():
    attributes = telemetry.build_resource().attributes

    assert attributes["service.name"] == settings.OTEL_SERVICE_NAME
    assert attributes["service.namespace"] == "marketplace"
    assert attributes["service.version"] == settings.VERSION


def test_configure_telemetry_disabled_by_default(monkeypatch):
    monkeypatch.setattr(settings, "OTEL_ENABLED", False)

    assert telemetry.configure_telemetry(app=None, engine=None) is False
