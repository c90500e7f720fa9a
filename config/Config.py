# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-02
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass
from dotenv import load_dotenv, find_dotenv

# Load .env once globally
load_dotenv(find_dotenv(usecwd=True), override=True)


@dataclass(frozen=True)
class Config:
    # OpenAI (embeddings + chat)
    openai_api_key: str
    cron_secret: str

    openai_base_url: str = ""
    openai_embed_model: str = "text-embedding-3-large"
    openai_chat_model: str = "gpt-4o-mini"

    # Azure OpenAI (optional, embeddings only)
    openai_azure_api_key: str = ""
    openai_azure_endpoint: str = ""
    openai_azure_embed_deployment: str = ""

    # Chroma Vector Database (cloud when api key is set, else http host, else local path)
    chroma_api_key: str = ""
    chroma_tenant: str = ""
    chroma_database: str = ""
    chroma_host: str = ""
    chroma_path: str = "./data/chroma"
    chroma_collection: str = "chat-rag-index"

    # Source-of-truth store
    database_url: str = "sqlite:///./data/chat_rag.db"

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        # OpenAI direct
        "openai_api_key": "OPENAI_API_KEY",
        "openai_base_url": "OPENAI_BASE_URL",      # e.g. https://api.openai.com/v1
        "openai_embed_model": "OPENAI_EMBED_MODEL",
        "openai_chat_model": "OPENAI_CHAT_MODEL",

        # Azure OpenAI
        "openai_azure_api_key": "AZURE_OPENAI_API_KEY",
        "openai_azure_endpoint": "AZURE_OPENAI_ENDPOINT",
        "openai_azure_embed_deployment": "AZURE_OPENAI_EMBED_DEPLOYMENT",

        # Chroma
        "chroma_api_key": "CHROMA_API_KEY",
        "chroma_tenant": "CHROMA_TENANT",
        "chroma_database": "CHROMA_DATABASE",
        "chroma_host": "CHROMA_HOST",
        "chroma_path": "CHROMA_PATH",
        "chroma_collection": "CHROMA_COLLECTION",

        # Store + cron trigger
        "database_url": "RAG_DATABASE_URL",
        "cron_secret": "CRON_SECRET",
    }

    REQUIRED_FIELDS = ("openai_api_key", "cron_secret")

    # Convenient *groups* for use in tests / health checks
    AZURE_OPENAI_ENV_VARS = (
        "AZURE_OPENAI_API_KEY",
        "AZURE_OPENAI_ENDPOINT",
        "AZURE_OPENAI_EMBED_DEPLOYMENT",
    )

    CHROMA_CLOUD_ENV_VARS = (
        "CHROMA_API_KEY",
        "CHROMA_TENANT",
        "CHROMA_DATABASE",
    )

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables (unset vars keep their defaults)."""
        kwargs = {}
        for field_name, env_name in Config.ENV_VARS.items():
            value = (os.getenv(env_name) or "").strip()
            if value or field_name in Config.REQUIRED_FIELDS:
                kwargs[field_name] = value
        return Config(**kwargs)

    def __post_init__(self):
        """
        Fail fast if any required config is missing.
        """
        missing_fields = [f for f in self.REQUIRED_FIELDS if not getattr(self, f)]

        if missing_fields:
            missing_env_vars = [self.ENV_VARS[f] for f in missing_fields]
            raise ValueError(f"Missing required environment variables: {missing_env_vars}")

        if self.chroma_api_key and not (self.chroma_tenant and self.chroma_database):
            raise ValueError("CHROMA_API_KEY requires CHROMA_TENANT and CHROMA_DATABASE")

    @property
    def uses_azure_embeddings(self) -> bool:
        return bool(self.openai_azure_endpoint and self.openai_azure_api_key)

    @property
    def embed_model(self) -> str:
        if self.uses_azure_embeddings:
            return self.openai_azure_embed_deployment or self.openai_embed_model
        return self.openai_embed_model

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "openai_base_url": self.openai_base_url or "https://api.openai.com/v1",
            "embed_model": self.embed_model,
            "chat_model": self.openai_chat_model,
            "uses_azure_embeddings": self.uses_azure_embeddings,
            "openai_azure_endpoint": self.openai_azure_endpoint,
            "chroma_mode": (
                "cloud" if self.chroma_api_key else "http" if self.chroma_host else "local"
            ),
            "chroma_tenant": self.chroma_tenant,
            "chroma_database": self.chroma_database,
            "chroma_collection": self.chroma_collection,
            "database_url": self.database_url.split("@")[-1],
        }
