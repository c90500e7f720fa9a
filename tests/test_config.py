# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-14
# Description: test_config.py
# -----------------------------------------------------------------------------
import pytest

from config.Config import Config


@pytest.fixture
def clean_env(monkeypatch):
    for env_name in Config.ENV_VARS.values():
        monkeypatch.delenv(env_name, raising=False)
    return monkeypatch


def test_from_env_reads_required_and_optional_values(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("CRON_SECRET", "s3cret")
    clean_env.setenv("CHROMA_HOST", "chroma.internal:8001")
    clean_env.setenv("RAG_DATABASE_URL", "postgresql://rag:pw@db.internal/rag")

    cfg = Config.from_env()

    assert cfg.openai_api_key == "sk-test"
    assert cfg.cron_secret == "s3cret"
    assert cfg.openai_embed_model == "text-embedding-3-large"
    summary = cfg.summary()
    assert summary["chroma_mode"] == "http"
    # credentials never reach the log summary
    assert summary["database_url"] == "db.internal/rag"
    assert "sk-test" not in str(summary)


def test_missing_required_values_fail_fast(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    with pytest.raises(ValueError, match="CRON_SECRET"):
        Config.from_env()


def test_chroma_cloud_needs_tenant_and_database():
    with pytest.raises(ValueError):
        Config(openai_api_key="k", cron_secret="s", chroma_api_key="ck")

    cfg = Config(openai_api_key="k", cron_secret="s", chroma_api_key="ck", chroma_tenant="t", chroma_database="d")
    assert cfg.summary()["chroma_mode"] == "cloud"


def test_azure_embeddings_use_deployment_name():
    cfg = Config(
        openai_api_key="k",
        cron_secret="s",
        openai_azure_api_key="ak",
        openai_azure_endpoint="https://example.openai.azure.com",
        openai_azure_embed_deployment="embed-prod",
    )
    assert cfg.uses_azure_embeddings
    assert cfg.embed_model == "embed-prod"
