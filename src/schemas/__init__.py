"""Schema definitions for app template documents."""

from .app import (
    AppDefinition,
    AppMetadata,
    ConfigField,
    ConfigurationSchema,
    DockerConfig,
    HealthCheckConfig,
    LifecycleConfig,
    PortDefinition,
    SelectOption,
    ValidationRules,
    VolumeDefinition,
)

__all__ = [
    "AppDefinition",
    "AppMetadata",
    "DockerConfig",
    "ConfigurationSchema",
    "ConfigField",
    "SelectOption",
    "ValidationRules",
    "VolumeDefinition",
    "PortDefinition",
    "HealthCheckConfig",
    "LifecycleConfig",
]
