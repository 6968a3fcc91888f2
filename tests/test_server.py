import pytest
from fastapi.testclient import TestClient

from inquiry_service.config_loader import MailConfig, ServiceConfig
from inquiry_service.errors import ConfigError
from inquiry_service.server import build_services, create_server_app


def test_build_services_requires_database_url():
    with pytest.raises(ConfigError):
        build_services(ServiceConfig())


def test_build_services_wires_degraded_dispatcher(tmp_path):
    services = build_services(ServiceConfig(database_url=f"sqlite:{tmp_path / 'srv.db'}"))

    assert services.dispatcher.enabled is False
    assert services.orchestrator.store is services.store
    assert services.orchestrator.dispatcher is services.dispatcher
    assert services.metrics.registry.get_sample_value("inquiry_mail_enabled") == 0.0


def test_server_app_round_trip(tmp_path, draft):
    settings = ServiceConfig(database_url=f"sqlite:{tmp_path / 'srv.db'}", api_token="tok")

    with TestClient(create_server_app(settings)) as client:
        assert client.get("/health").json() == {"status": "ok", "mail": "disabled"}

        created = client.post("/inquiries", json=draft)
        assert created.status_code == 202
        assert created.json()["notification_error"] == "NotConfigured"

        inquiry_id = created.json()["id"]
        stored = client.get(f"/inquiries/{inquiry_id}", headers={"X-API-Token": "tok"})
        assert stored.status_code == 200
        assert stored.json()["requirement"] == draft["requirement"]

        metrics = client.get("/metrics", headers={"X-API-Token": "tok"}).text
        assert 'inquiry_submissions_total{outcome="partial_success"} 1.0' in metrics
        assert 'inquiry_notifications_total{result="not_configured"} 1.0' in metrics


def test_server_app_sends_mail(tmp_path, draft, mail_config, smtp_handler):
    settings = ServiceConfig(database_url=f"sqlite:{tmp_path / 'srv.db'}", mail=mail_config)

    with TestClient(create_server_app(settings)) as client:
        response = client.post("/inquiries", json=draft)

    assert response.status_code == 201
    assert response.json()["notified"] is True
    assert len(smtp_handler.messages) == 1


def test_server_app_with_unreachable_database(tmp_path, draft):
    settings = ServiceConfig(database_url=str(tmp_path / "missing" / "srv.db"), mail=MailConfig())
    client = TestClient(create_server_app(settings))

    response = client.post("/inquiries", json=draft)

    assert response.status_code == 503


def test_lifespan_closes_storage_on_shutdown(tmp_path, monkeypatch):
    app = create_server_app(ServiceConfig(database_url=f"sqlite:{tmp_path / 'srv.db'}"))
    closed = []

    async def record_close():
        closed.append(True)

    monkeypatch.setattr(app.state.store, "close", record_close)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert closed == []

    assert closed == [True]
