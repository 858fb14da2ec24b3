"""Grafana Cloud resources."""

from tfgrafana.resources.cloud.resource_access_policy_token import AccessPolicyTokenResource
from tfgrafana.resources.cloud.resource_stack_service_account import StackServiceAccountResource
from tfgrafana.resources.cloud.resource_stack_service_account_token import StackServiceAccountTokenResource

RESOURCES = [AccessPolicyTokenResource, StackServiceAccountResource, StackServiceAccountTokenResource]
DATA_SOURCES: list = []

__all__ = [
    "AccessPolicyTokenResource",
    "DATA_SOURCES",
    "RESOURCES",
    "StackServiceAccountResource",
    "StackServiceAccountTokenResource",
]
