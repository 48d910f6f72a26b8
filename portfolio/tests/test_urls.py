from portfolio.config import DeploymentEnv
from portfolio.urls import DEFAULT_BASE_URL, get_base_url


def test_base_url_uses_deployment_host():
    env = DeploymentEnv(vercel_url="my-site-abc123.vercel.app")
    assert get_base_url(env) == "https://my-site-abc123.vercel.app"


def test_base_url_defaults_to_local_server(monkeypatch):
    monkeypatch.delenv("VERCEL_URL", raising=False)
    assert get_base_url() == DEFAULT_BASE_URL
    assert get_base_url(DeploymentEnv(vercel_url="")) == DEFAULT_BASE_URL


def test_base_url_reads_environment(monkeypatch):
    monkeypatch.setenv("VERCEL_URL", "preview.example.dev")
    assert get_base_url() == "https://preview.example.dev"
