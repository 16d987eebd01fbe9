"""Curation template models.

A template is an ordered list of conditions that must all match an item and
an ordered list of actions applied to every matching item. Both are closed
sets of variants checked when the template is loaded.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from license_curator.models.base import CaseInsensitiveEnum
from license_curator.models.curation import CurationStatus, PriorityLevel


class TemplateField(CaseInsensitiveEnum):
    """Item fields a condition can test."""

    DEPENDENCY_ID = "DEPENDENCY_ID"
    DEPENDENCY_NAME = "DEPENDENCY_NAME"
    DEPENDENCY_VERSION = "DEPENDENCY_VERSION"
    SCOPE = "SCOPE"
    ORIGINAL_LICENSE = "ORIGINAL_LICENSE"
    DECLARED_LICENSES = "DECLARED_LICENSES"
    DETECTED_LICENSES = "DETECTED_LICENSES"
    EFFECTIVE_LICENSE = "EFFECTIVE_LICENSE"
    AI_SUGGESTED_LICENSE = "AI_SUGGESTED_LICENSE"
    AI_CONFIDENCE = "AI_CONFIDENCE"
    STATUS = "STATUS"
    PRIORITY_LEVEL = "PRIORITY_LEVEL"
    BLOCKING_RULE = "BLOCKING_RULE"


class ConditionOperator(CaseInsensitiveEnum):
    EQUALS = "EQUALS"
    NOT_EQUALS = "NOT_EQUALS"
    CONTAINS = "CONTAINS"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    MATCHES = "MATCHES"
    IS_EMPTY = "IS_EMPTY"
    IS_NOT_EMPTY = "IS_NOT_EMPTY"

    @property
    def needs_value(self) -> bool:
        return self not in (ConditionOperator.IS_EMPTY, ConditionOperator.IS_NOT_EMPTY)


class TemplateCondition(BaseModel):
    """Tests one item field."""

    model_config = {"extra": "forbid"}

    field: TemplateField
    operator: ConditionOperator
    value: Optional[str] = None

    @model_validator(mode="after")
    def _check_value(self) -> "TemplateCondition":
        if self.operator.needs_value and self.value is None:
            raise ValueError(f"operator {self.operator.value} requires a value")
        if self.operator == ConditionOperator.MATCHES:
            try:
                re.compile(self.value or "")
            except re.error as e:
                raise ValueError(f"invalid regular expression '{self.value}': {e}") from e
        return self


class SetStatusAction(BaseModel):
    """Accept, reject or reset matching items."""

    model_config = {"extra": "forbid"}

    type: Literal["SET_STATUS"] = "SET_STATUS"
    status: CurationStatus

    @field_validator("status")
    @classmethod
    def _not_modified(cls, status: CurationStatus) -> CurationStatus:
        if status == CurationStatus.MODIFIED:
            raise ValueError("use SET_LICENSE to modify an item's license")
        return status


class SetLicenseAction(BaseModel):
    """Modify the license of matching items."""

    model_config = {"extra": "forbid"}

    type: Literal["SET_LICENSE"] = "SET_LICENSE"
    license: str = Field(min_length=1)


class AddCommentAction(BaseModel):
    model_config = {"extra": "forbid"}

    type: Literal["ADD_COMMENT"] = "ADD_COMMENT"
    comment: str = Field(min_length=1)


class SetPriorityAction(BaseModel):
    model_config = {"extra": "forbid"}

    type: Literal["SET_PRIORITY"] = "SET_PRIORITY"
    level: PriorityLevel


TemplateAction = Annotated[
    Union[SetStatusAction, SetLicenseAction, AddCommentAction, SetPriorityAction],
    Field(discriminator="type"),
]


class CurationTemplate(BaseModel):
    """A reusable bulk curation rule."""

    model_config = {"extra": "forbid"}

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    conditions: list[TemplateCondition] = Field(min_length=1)
    actions: list[TemplateAction] = Field(min_length=1)
    created_by: Optional[str] = None
    is_global: bool = False
    usage_count: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None


class TemplateApplicationResult(BaseModel):
    """Outcome of applying (or dry-running) a template."""

    model_config = {"extra": "forbid"}

    template_id: str
    template_name: str
    dry_run: bool
    matched_items: list[str] = Field(default_factory=list)

    @property
    def matched_count(self) -> int:
        return len(self.matched_items)
