"""Typed response models for the cluster APIs."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ElasticModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class ErrorCause(ElasticModel):
    type: str | None = None
    reason: str | None = None


class ErrorDetails(ErrorCause):
    root_cause: list[ErrorCause] = Field(default_factory=list)
    caused_by: ErrorCause | None = None


class ErrorResponse(ElasticModel):
    """Error envelope returned by the cluster for non-2xx responses."""

    error: ErrorDetails | str | None = None
    status: int | None = None


class ClusterUpdateSettingsResponse(ElasticModel):
    """Result of reading or updating cluster-wide settings."""

    acknowledged: bool = False
    shards_acknowledged: bool = False
    persistent: dict[str, Any] = Field(default_factory=dict)
    transient: dict[str, Any] = Field(default_factory=dict)
    defaults: dict[str, Any] | None = None
