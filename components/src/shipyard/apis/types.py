# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Object models shared by the capacity controller and its collaborators.

All models serialize to the camelCase field names used by the stored
objects (``model_dump(by_alias=True, exclude_none=True)``) and accept either
camelCase or snake_case on input.
"""

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

RELEASE_LABEL = "shipper-release"
RELEASE_REPLICAS_ANNOTATION = "shipper.booking.com/release.replicas"
RELEASE_KIND = "Release"

API_GROUP = "shipper.booking.com"
API_VERSION = "v1"


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ClusterConditionType(str, Enum):
    OPERATIONAL = "Operational"
    READY = "Ready"


class OwnerReference(ApiModel):
    api_version: str = f"{API_GROUP}/{API_VERSION}"
    kind: str
    name: str
    uid: Optional[str] = None


class ObjectMeta(ApiModel):
    # keep server-managed fields (finalizers, generation, ...) across a replace
    model_config = ConfigDict(extra="allow")

    name: str
    namespace: str
    uid: Optional[str] = None
    resource_version: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    owner_references: List[OwnerReference] = Field(default_factory=list)

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def none_as_empty_dict(cls, value):
        return value if value is not None else {}

    @field_validator("owner_references", mode="before")
    @classmethod
    def none_as_empty_list(cls, value):
        return value if value is not None else []

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


class Release(ApiModel):
    """A versioned deployable unit; only its metadata is consulted here."""

    metadata: ObjectMeta


class ClusterCapacityTarget(ApiModel):
    model_config = ConfigDict(extra="allow")

    name: str
    percent: int = Field(ge=0, le=100)


class CapacityTargetSpec(ApiModel):
    model_config = ConfigDict(extra="allow")

    clusters: List[ClusterCapacityTarget] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_cluster_names(self):
        seen = set()
        for cluster in self.clusters:
            if cluster.name in seen:
                raise ValueError(f"duplicate cluster name {cluster.name!r}")
            seen.add(cluster.name)
        return self


class PodCondition(ApiModel):
    type: str
    status: ConditionStatus
    reason: Optional[str] = None
    message: Optional[str] = None
    last_probe_time: Optional[str] = None
    last_transition_time: Optional[str] = None

    @field_validator("reason", "message", mode="before")
    @classmethod
    def empty_as_none(cls, value):
        return value or None


class PodStatus(ApiModel):
    """Summary of a sad pod as reported in the capacity target status."""

    name: str
    condition: PodCondition


class ClusterCapacityCondition(ApiModel):
    type: ClusterConditionType
    status: ConditionStatus
    reason: Optional[str] = None
    message: Optional[str] = None
    last_transition_time: Optional[str] = None

    @field_validator("reason", "message", mode="before")
    @classmethod
    def empty_as_none(cls, value):
        return value or None


class ClusterCapacityStatus(ApiModel):
    name: str
    available_replicas: int = 0
    achieved_percent: int = 0
    conditions: List[ClusterCapacityCondition] = Field(default_factory=list)
    sad_pods: List[PodStatus] = Field(default_factory=list)

    @field_validator("conditions", "sad_pods", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value if value is not None else []


class CapacityTargetStatus(ApiModel):
    clusters: List[ClusterCapacityStatus] = Field(default_factory=list)

    @field_validator("clusters", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value if value is not None else []


class CapacityTarget(ApiModel):
    model_config = ConfigDict(extra="allow")

    api_version: str = f"{API_GROUP}/{API_VERSION}"
    kind: str = "CapacityTarget"
    metadata: ObjectMeta
    spec: CapacityTargetSpec = Field(default_factory=CapacityTargetSpec)
    status: CapacityTargetStatus = Field(default_factory=CapacityTargetStatus)

    @field_validator("status", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value if value is not None else {}


class LabelSelectorRequirement(ApiModel):
    """One ``matchExpressions`` entry of a label selector."""

    key: str
    operator: Literal["In", "NotIn", "Exists", "DoesNotExist"]
    values: List[str] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value if value is not None else []

    def matches(self, labels: Dict[str, str]) -> bool:
        if self.operator == "In":
            return labels.get(self.key) in self.values
        if self.operator == "NotIn":
            return labels.get(self.key) not in self.values
        if self.operator == "Exists":
            return self.key in labels
        return self.key not in labels

    def to_selector(self) -> str:
        """Render in label selector syntax, e.g. ``tier in (web,api)``."""
        if self.operator == "In":
            return f"{self.key} in ({','.join(self.values)})"
        if self.operator == "NotIn":
            return f"{self.key} notin ({','.join(self.values)})"
        if self.operator == "Exists":
            return self.key
        return f"!{self.key}"


class Workload(ApiModel):
    """Deployment-like object on a target cluster that runs the release pods."""

    name: str
    namespace: str
    labels: Dict[str, str] = Field(default_factory=dict)
    replicas: int = 0
    available_replicas: int = 0
    selector: Dict[str, str] = Field(default_factory=dict)
    match_expressions: List[LabelSelectorRequirement] = Field(default_factory=list)


class Pod(ApiModel):
    name: str
    namespace: str
    labels: Dict[str, str] = Field(default_factory=dict)
    phase: Optional[str] = None
    conditions: List[PodCondition] = Field(default_factory=list)

    def get_condition(self, condition_type: str) -> Optional[PodCondition]:
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None
