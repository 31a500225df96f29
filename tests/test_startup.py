from paygate.common.startup import startup_config


def test_startup_config_hides_secrets(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_live_realvalue")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4318?auth=sk_test_leak")
    monkeypatch.delenv("STRIPE_API_VERSION", raising=False)

    config = startup_config(
        "paygate",
        ["STRIPE_SECRET_KEY", "LOG_LEVEL", "OTEL_EXPORTER_OTLP_ENDPOINT", "STRIPE_API_VERSION"],
    )

    assert config["service"] == "paygate"
    assert config["STRIPE_SECRET_KEY"] == "<redacted>"
    assert config["LOG_LEVEL"] == "DEBUG"
    assert "sk_test_leak" not in config["OTEL_EXPORTER_OTLP_ENDPOINT"]
    assert config["STRIPE_API_VERSION"] == "<unset>"
