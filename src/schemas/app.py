"""Pydantic models for app template definitions.

Field names are snake_case in Python and camelCase in the definition
documents (``restartPolicy``, ``envVar``, ``containerPort`` ...). Models are
frozen once constructed.

Only the metadata identity is checked when a template is built. Container
settings, ports, health checks and hooks are descriptive: missing parts take
defaults and unrecognized values are kept as written.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TemplateModel(BaseModel):
    """Base model for all template definition parts."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class AppMetadata(TemplateModel):
    """Identity and discovery attributes of an app template."""

    id: str = Field(min_length=1, description="Unique template identifier")
    name: str = Field(min_length=1, description="Human-readable application name")
    description: str = Field("", description="Short description")
    category: str = Field("", description="Catalog category")
    tags: list[str] = Field(default_factory=list, description="Search tags")
    version: str = Field("", description="Application version")
    icon: str | None = Field(None, description="Icon URL or path")
    maintainer: str | None = Field(None, description="Template maintainer")
    documentation: str | None = Field(None, description="Documentation URL")


class DockerConfig(TemplateModel):
    """Container deployment settings."""

    image: str = Field("", description="Image reference")
    restart_policy: str = Field(
        "unless-stopped",
        description="Container restart policy (no, always, on-failure, unless-stopped)",
    )
    network_mode: str | None = Field(None, description="Docker network mode")
    privileged: bool = Field(False, description="Run the container privileged")
    cap_add: list[str] = Field(default_factory=list, description="Capabilities to add")
    cap_drop: list[str] = Field(
        default_factory=list, description="Capabilities to drop"
    )

    @field_validator("restart_policy", mode="before")
    @classmethod
    def normalize_restart_policy(cls, v: Any) -> Any:
        """Accept 'never' as a spelling of Docker's 'no' policy."""
        if v == "never":
            return "no"
        return v


class ValidationRules(TemplateModel):
    """Optional constraints applied to a configuration value."""

    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    min: float | None = None
    max: float | None = None
    pattern: str | None = None
    pattern_message: str | None = None


class SelectOption(TemplateModel):
    """One choice of a select field."""

    label: str = ""
    value: str | int | float | bool


class ConfigField(TemplateModel):
    """A single user-configurable input of a template.

    ``key`` identifies the value in submitted configuration, ``env_var`` is
    the container environment variable the value ends up in.
    """

    key: str = Field(description="Lookup key in submitted config")
    label: str = Field("", description="Human-readable field label")
    description: str | None = Field(None, description="Help text for the field")
    type: str = Field(
        "string", description="Field data type (string, password, number, boolean, select)"
    )
    default: str | int | float | bool | None = Field(
        None, description="Value used when none is supplied"
    )
    options: list[SelectOption] | None = Field(
        None, description="Valid choices (select fields)"
    )
    env_var: str = Field("", description="Runtime environment variable")
    validation: ValidationRules | None = None

    @property
    def required(self) -> bool:
        return self.validation is not None and self.validation.required


class ConfigurationSchema(TemplateModel):
    """Ordered list of configuration fields."""

    fields: list[ConfigField] = Field(default_factory=list)

    def keys(self) -> list[str]:
        return [field.key for field in self.fields]


class VolumeDefinition(TemplateModel):
    """Mount point the container expects."""

    container_path: str = ""
    description: str = ""
    required: bool = False


class PortDefinition(TemplateModel):
    """Port exposed by the container."""

    container_port: int
    protocol: str = "tcp"
    description: str = ""
    default_host_port: int | None = None

    @property
    def host_port(self) -> int:
        """Suggested host port, falling back to the container port."""
        return self.default_host_port or self.container_port


class HealthCheckConfig(TemplateModel):
    """Health probing settings, carried as data only."""

    type: str = "tcp"
    command: str | None = None
    path: str | None = None
    port: int | None = None
    interval: int | None = None
    timeout: int | None = None
    retries: int | None = None
    start_period: int | None = None


class BackupConfig(TemplateModel):
    command: str = ""
    paths: list[str] = Field(default_factory=list)


class RestoreConfig(TemplateModel):
    command: str = ""


class LifecycleConfig(TemplateModel):
    """Install/uninstall hooks and backup commands, carried as data only."""

    pre_install: list[str] | None = None
    post_install: list[str] | None = None
    pre_uninstall: list[str] | None = None
    post_uninstall: list[str] | None = None
    backup: BackupConfig | None = None
    restore: RestoreConfig | None = None


class AppDefinition(TemplateModel):
    """An installable application template."""

    metadata: AppMetadata
    docker: DockerConfig
    configuration: ConfigurationSchema
    volumes: list[VolumeDefinition] = Field(default_factory=list)
    ports: list[PortDefinition] = Field(default_factory=list)
    health_check: HealthCheckConfig | None = None
    lifecycle: LifecycleConfig | None = None

    @property
    def id(self) -> str:
        return self.metadata.id
