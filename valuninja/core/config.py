from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from valuninja.models.location import AffiliateConfig


class AppSettings(BaseSettings):
    api_title: str = "ValuNinja Scout API"
    api_version: str = "0.1.0"

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY", "api_key"),
    )
    openai_api_key: str | None = None

    scout_llm_provider: str = "google"  # google | openai | fake
    scout_model: str = "gemini-3-flash-preview"
    scout_temperature: float = 0.0
    scout_timeout_sec: int = 60

    region_time_zone: str | None = None

    amazon_tag: str = Field("", validation_alias=AliasChoices("AFFILIATE_AMAZON_TAG", "amazon_tag"))
    ebay_id: str = Field("", validation_alias=AliasChoices("AFFILIATE_EBAY_ID", "ebay_id"))
    best_buy_id: str = Field("", validation_alias=AliasChoices("AFFILIATE_BEST_BUY_ID", "best_buy_id"))
    impact_id: str = Field("", validation_alias=AliasChoices("AFFILIATE_IMPACT_ID", "impact_id"))

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ]
    )
    frontend_origin: str | None = Field(default=None, alias="FRONTEND_ORIGIN")
    langfuse_public_key: str | None = None
    langfuse_secret_key: str | None = None
    langfuse_host: str | None = None
    langfuse_release: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def resolved_api_key(self) -> str | None:
        """Credential for the configured scout provider, or None when nothing is set."""
        if self.scout_llm_provider.lower() == "openai":
            return self.openai_api_key or self.api_key
        return self.api_key

    @property
    def default_affiliates(self) -> AffiliateConfig:
        return AffiliateConfig(
            amazonTag=self.amazon_tag,
            ebayId=self.ebay_id,
            bestBuyId=self.best_buy_id,
            impactId=self.impact_id,
        )

    @property
    def resolved_cors_origins(self) -> List[str]:
        """
        Returns the configured CORS origins plus the optional front-end origin, deduped.
        """
        normalized: list[str] = []

        def _append(origin: str | None) -> None:
            if not origin:
                return
            cleaned = origin.rstrip("/")
            if cleaned not in normalized:
                normalized.append(cleaned)

        for origin in self.cors_origins:
            _append(origin)

        _append(self.frontend_origin)
        return normalized


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
