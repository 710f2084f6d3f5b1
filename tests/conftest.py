"""Shared fixtures for app catalog tests."""

import copy
import json
from pathlib import Path
from typing import Any

import pytest
import yaml

REDIS_APP: dict[str, Any] = {
    "metadata": {
        "id": "redis",
        "name": "Key Value Store",
        "description": "In-memory data structure store",
        "category": "Databases",
        "tags": ["redis", "cache"],
        "version": "7.2.4",
    },
    "docker": {"image": "redis:7.2", "restartPolicy": "unless-stopped"},
    "configuration": {
        "fields": [
            {
                "key": "password",
                "label": "Password",
                "type": "password",
                "envVar": "REDIS_PASSWORD",
                "validation": {"required": True, "minLength": 8},
            },
            {
                "key": "maxmemory",
                "label": "Max memory (MB)",
                "type": "number",
                "default": 256,
                "envVar": "REDIS_MAXMEMORY",
                "validation": {"min": 64, "max": 4096},
            },
        ]
    },
    "volumes": [
        {"containerPath": "/data", "description": "Persistent data", "required": True}
    ],
    "ports": [
        {"containerPort": 6379, "protocol": "tcp", "description": "Redis protocol"}
    ],
}

NEXTCLOUD_APP: dict[str, Any] = {
    "metadata": {
        "id": "nextcloud",
        "name": "Nextcloud",
        "description": "Self-hosted file sync and share",
        "category": "Productivity",
        "tags": ["files", "sync"],
        "version": "28.0.1",
        "icon": "https://example.com/nextcloud.svg",
    },
    "docker": {"image": "nextcloud:28", "restartPolicy": "always"},
    "configuration": {
        "fields": [
            {
                "key": "admin_user",
                "label": "Admin user",
                "type": "string",
                "default": "admin",
                "envVar": "NEXTCLOUD_ADMIN_USER",
                "validation": {
                    "required": True,
                    "pattern": "[a-z][a-z0-9_]*",
                    "patternMessage": "Admin user must be lowercase",
                },
            },
            {
                "key": "db_type",
                "label": "Database",
                "type": "select",
                "default": "sqlite",
                "envVar": "NEXTCLOUD_DB_TYPE",
                "options": [
                    {"label": "SQLite", "value": "sqlite"},
                    {"label": "PostgreSQL", "value": "pgsql"},
                ],
            },
        ]
    },
    "volumes": [],
    "ports": [{"containerPort": 80, "protocol": "tcp", "defaultHostPort": 8080}],
    "healthCheck": {
        "type": "http",
        "path": "/status.php",
        "port": 80,
        "interval": 30,
        "timeout": 5,
        "retries": 3,
    },
    "lifecycle": {
        "postInstall": ["occ maintenance:install"],
        "backup": {"command": "occ maintenance:mode --on", "paths": ["/var/www/html"]},
    },
}


def write_definition(directory: Path, filename: str, data: Any) -> Path:
    """Write a definition document as JSON or YAML based on its extension."""
    path = directory / filename
    if path.suffix == ".json":
        path.write_text(json.dumps(data), encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


@pytest.fixture
def write_app():
    """Helper for writing definition files into a directory."""
    return write_definition


@pytest.fixture
def redis_app() -> dict[str, Any]:
    return copy.deepcopy(REDIS_APP)


@pytest.fixture
def nextcloud_app() -> dict[str, Any]:
    return copy.deepcopy(NEXTCLOUD_APP)


@pytest.fixture
def repository_dir(tmp_path, redis_app, nextcloud_app) -> Path:
    """Directory with two valid definitions, one per supported format."""
    directory = tmp_path / "repository"
    directory.mkdir()
    write_definition(directory, "redis.json", redis_app)
    write_definition(directory, "nextcloud.yaml", nextcloud_app)
    return directory
