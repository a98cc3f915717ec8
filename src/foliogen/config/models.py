"""Configuration models describing foliogen settings."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class FoliogenBaseModel(BaseModel):
    """Shared configuration for foliogen settings models."""

    model_config = ConfigDict(extra="forbid")


class PathSettings(FoliogenBaseModel):
    """Filesystem locations used by the generators.

    Attributes:
        portfolios_root: Directory holding one folder per portfolio type.
        overrides_file: JSON file with manual date corrections.
    """

    portfolios_root: str = "src/images/Portfolios"
    overrides_file: str = "src/images/Portfolios/date-overrides.json"


class DateSettings(FoliogenBaseModel):
    """Date inference options.

    Attributes:
        sample_images: Number of images inspected when an entity holds images directly.
        use_exif: Whether EXIF tags are consulted when filenames carry no date.
    """

    sample_images: int = Field(default=3, ge=1)
    use_exif: bool = True


class ManifestSettings(FoliogenBaseModel):
    """Manifest output options.

    Attributes:
        version: Default version string stamped into aggregate manifests.
        versions: Per portfolio type version overrides.
        write_per_folder: Whether legacy per-folder ``manifest.json`` files are written.
    """

    version: str = "1.0.0"
    versions: Dict[str, str] = Field(default_factory=dict)
    write_per_folder: bool = False

    def version_for(self, portfolio_type: str) -> str:
        """Return the version configured for ``portfolio_type``."""
        return self.versions.get(portfolio_type, self.version)


class WebhookSettings(FoliogenBaseModel):
    """Cache-refresh webhook options.

    Attributes:
        url: Explicit endpoint, may contain a ``{type}`` placeholder.
        base: Base URL that ``/refresh/<type>`` is appended to.
        secret: Shared secret sent as ``x-webhook-secret``.
        always: Notify even when the manifest was left unchanged.
        disabled: Skip notifications entirely.
        timeout_seconds: Request timeout.
    """

    url: Optional[str] = None
    base: str = "http://localhost:3001/api/v1/webhooks"
    secret: Optional[str] = None
    always: bool = False
    disabled: bool = False
    timeout_seconds: float = 8.0


class FeaturedSettings(FoliogenBaseModel):
    """Featured manifest selection defaults.

    Attributes:
        items_per_category: Newest items taken from each source portfolio.
        total_limit: Maximum number of featured items overall.
        sources: Portfolio types read as inputs.
        version: Version string stamped into the featured manifest.
    """

    items_per_category: int = Field(default=4, ge=1)
    total_limit: int = Field(default=12, ge=1)
    sources: List[Literal["concert", "events", "journalism", "nature", "portrait"]] = Field(
        default_factory=lambda: ["concert", "events", "journalism"]
    )
    version: str = "2.0.0"


class LoggingSettings(FoliogenBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(FoliogenBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class FoliogenConfig(FoliogenBaseModel):
    """Top-level configuration struct for foliogen."""

    paths: PathSettings = Field(default_factory=PathSettings)
    dates: DateSettings = Field(default_factory=DateSettings)
    manifest: ManifestSettings = Field(default_factory=ManifestSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)
    featured: FeaturedSettings = Field(default_factory=FeaturedSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "FoliogenBaseModel",
    "PathSettings",
    "DateSettings",
    "ManifestSettings",
    "WebhookSettings",
    "FeaturedSettings",
    "LoggingSettings",
    "CLIOptions",
    "FoliogenConfig",
]
