"""
Resource framework: schemas, typed values, diagnostics and handler contracts.
"""

from tfgrafana.framework.diagnostics import Diagnostic, Diagnostics, Severity
from tfgrafana.framework.lifecycle import InstanceStatus, ResourceInstance, read_data_source
from tfgrafana.framework.resource import (
    Category,
    CreateRequest,
    DataSource,
    DeleteRequest,
    ImportStateRequest,
    ReadRequest,
    Resource,
    Response,
    State,
    UpdateRequest,
)
from tfgrafana.framework.resource_id import (
    ResourceID,
    ResourceIDError,
    int_id_field,
    new_resource_id,
    new_resource_id_with_legacy_separator,
    string_id_field,
)
from tfgrafana.framework.schema import (
    DEFAULT_DESCRIPTIONS,
    Attribute,
    Block,
    BoolAttribute,
    DescriptionConfig,
    Float64Attribute,
    Int64Attribute,
    ListAttribute,
    MapAttribute,
    Schema,
    SetAttribute,
    StringAttribute,
)
from tfgrafana.framework.tfsdk import get_model, tfsdk, to_state
from tfgrafana.framework.types import BoolValue, Float64Value, Int64Value, ListValue, SetValue, StringValue

__all__ = [
    "Attribute",
    "Block",
    "BoolAttribute",
    "BoolValue",
    "Category",
    "CreateRequest",
    "DEFAULT_DESCRIPTIONS",
    "DataSource",
    "DeleteRequest",
    "DescriptionConfig",
    "Diagnostic",
    "Diagnostics",
    "Float64Attribute",
    "Float64Value",
    "ImportStateRequest",
    "InstanceStatus",
    "Int64Attribute",
    "Int64Value",
    "ListAttribute",
    "ListValue",
    "MapAttribute",
    "ReadRequest",
    "Resource",
    "ResourceID",
    "ResourceIDError",
    "ResourceInstance",
    "Response",
    "Schema",
    "SetAttribute",
    "SetValue",
    "Severity",
    "State",
    "StringAttribute",
    "StringValue",
    "UpdateRequest",
    "get_model",
    "int_id_field",
    "new_resource_id",
    "new_resource_id_with_legacy_separator",
    "read_data_source",
    "string_id_field",
    "tfsdk",
    "to_state",
]
