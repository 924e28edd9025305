"""Configuration management for the analysis server."""

import os
from dataclasses import dataclass, replace


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class AnalysisSettings:
    """Feature toggles of the unused exports analysis."""

    # Analysis Configuration
    detect_circular_imports: bool = False
    consider_main_exports_used: bool = False
    show_ignored_exports: bool = False

    # Runtime Configuration
    max_workers: int = 8
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "AnalysisSettings":
        """Create settings from environment variables."""
        return cls(
            detect_circular_imports=_env_flag("UNUSED_DETECT_CIRCULAR_IMPORTS"),
            consider_main_exports_used=_env_flag("UNUSED_CONSIDER_MAIN_EXPORTS_USED"),
            show_ignored_exports=_env_flag("UNUSED_SHOW_IGNORED_EXPORTS"),
            max_workers=int(os.getenv("UNUSED_MAX_WORKERS", "8")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def with_overrides(self, **overrides) -> "AnalysisSettings":
        """Return a copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self

    def validate(self) -> tuple[bool, list[str]]:
        """Validate configuration settings."""
        errors = []

        if self.max_workers <= 0:
            errors.append("max_workers must be positive")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_log_levels:
            errors.append(f"log_level must be one of {valid_log_levels}")

        return len(errors) == 0, errors


def get_settings() -> AnalysisSettings:
    """Get the validated settings for this process."""
    settings = AnalysisSettings.from_environment()
    is_valid, errors = settings.validate()
    if not is_valid:
        raise ValueError(f"Invalid analysis configuration: {', '.join(errors)}")
    return settings
