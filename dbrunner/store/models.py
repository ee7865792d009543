"""Persisted user configuration model.

The on-disk document maps lowercase database identifiers to per-user
overrides. Both maps are optional so documents written before a field
existed still load.
"""

from pydantic import BaseModel, ConfigDict, Field


class UserConfig(BaseModel):
    """User overrides for the built-in catalog.

    Attributes:
        volume_paths: Host directory bind-mounted as the data directory.
        image_tags: Image tag replacing the catalog default.
    """

    model_config = ConfigDict(extra="ignore")

    volume_paths: dict[str, str] = Field(
        default_factory=dict,
        description="Custom host volume path per database identifier",
    )
    image_tags: dict[str, str] = Field(
        default_factory=dict,
        description="Custom image tag per database identifier",
    )

    def volume_path(self, key: str) -> str | None:
        """Configured volume path, with empty strings treated as unset."""
        return self.volume_paths.get(key) or None

    def image_tag(self, key: str) -> str | None:
        """Configured image tag, with empty strings treated as unset."""
        return self.image_tags.get(key) or None


__all__ = ["UserConfig"]
