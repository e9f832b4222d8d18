"""Provider route configuration loaded from the application config file."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field


class ProviderRoute(BaseModel):
    """Multimodal provider endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(ge=0.1)
    api_key_env: Optional[str] = None
    api_key_header: str = "x-goog-api-key"
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)

    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.endpoint.format(model=self.model)}"


class AppConfig(BaseModel):
    """Application configuration root."""

    llm_routes: Dict[str, ProviderRoute]
    registry: Dict[str, str]


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    data = Path(path).read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def resolve_route(cfg: AppConfig, target: str) -> ProviderRoute:
    """Return the route bound to ``target`` in the registry."""

    if target not in cfg.registry:
        raise KeyError(f"Registry entry missing for '{target}'")
    route_id = cfg.registry[target]
    if route_id not in cfg.llm_routes:
        raise KeyError(f"Route '{route_id}' missing for '{target}'")
    return cfg.llm_routes[route_id]


def load_route(path: Path, target: str) -> ProviderRoute:
    """Load configuration and resolve a single route."""

    return resolve_route(load_config(path), target)
