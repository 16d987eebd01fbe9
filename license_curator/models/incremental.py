"""Models describing the difference between two scans."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from license_curator.models.base import CaseInsensitiveEnum


class ChangeType(CaseInsensitiveEnum):
    ADDED = "ADDED"
    UPDATED = "UPDATED"
    REMOVED = "REMOVED"


class VersionDirection(CaseInsensitiveEnum):
    UPGRADE = "UPGRADE"
    DOWNGRADE = "DOWNGRADE"
    UNCHANGED = "UNCHANGED"
    UNKNOWN = "UNKNOWN"


class DependencyChange(BaseModel):
    """A dependency that was added, updated or removed."""

    model_config = {"extra": "forbid"}

    dependency_id: str
    dependency_name: str
    change_type: ChangeType
    previous_version: Optional[str] = None
    current_version: Optional[str] = None
    previous_license: Optional[str] = None
    current_license: Optional[str] = None
    version_direction: Optional[VersionDirection] = None

    @property
    def license_changed(self) -> bool:
        return (
            self.change_type == ChangeType.UPDATED
            and self.previous_license != self.current_license
        )


class IncrementalChanges(BaseModel):
    """Dependencies classified by how they changed between two scans."""

    model_config = {"extra": "forbid"}

    added: list[DependencyChange] = Field(default_factory=list)
    updated: list[DependencyChange] = Field(default_factory=list)
    removed: list[DependencyChange] = Field(default_factory=list)
    unchanged: list[str] = Field(
        default_factory=list, description="Ids present in both scans without changes"
    )

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.updated or self.removed)
