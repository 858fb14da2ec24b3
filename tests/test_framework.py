from dataclasses import dataclass

import pytest

from tfgrafana.framework.diagnostics import Diagnostics, Severity
from tfgrafana.framework.resource import State
from tfgrafana.framework.resource_id import (
    ResourceIDError,
    int_id_field,
    new_resource_id,
    new_resource_id_with_legacy_separator,
    string_id_field,
)
from tfgrafana.framework.schema import (
    Block,
    BoolAttribute,
    DescriptionConfig,
    Int64Attribute,
    ListAttribute,
    Schema,
    StringAttribute,
)
from tfgrafana.framework.tfsdk import get_model, tfsdk, to_state
from tfgrafana.framework.types import BoolValue, Int64Value, ListValue, SetValue, StringValue
from tfgrafana.framework.validators import (
    format_rfc3339,
    int_between,
    no_duplicate_names,
    one_of,
    parse_rfc3339,
    rfc3339_time,
    size_at_least,
    url_with_http_or_https,
)


@dataclass
class ChildModel:
    name: StringValue = tfsdk("name", StringValue)


@dataclass
class ParentModel:
    id: StringValue = tfsdk("id", StringValue)
    count: Int64Value = tfsdk("count", Int64Value)
    enabled: BoolValue = tfsdk("enabled", BoolValue)
    tags: SetValue = tfsdk("tags", SetValue)
    order: ListValue = tfsdk("order", ListValue)
    children: list[ChildModel] = tfsdk("child", list)


class TestTypedValues:
    def test_null_is_distinct_from_zero(self):
        assert StringValue(None).is_null
        assert not StringValue("").is_null
        assert StringValue(None).value_string() == ""
        assert Int64Value(None).value_int64() == 0
        assert BoolValue(None).value_bool() is False

    def test_set_equality_ignores_order(self):
        assert SetValue.of(["a", "b"]) == SetValue.of(["b", "a"])
        assert SetValue.of(["a"]) != SetValue(None)
        assert SetValue.of(["a", "a", "b"]).elements_as() == ["a", "b"]

    def test_list_keeps_order(self):
        assert ListValue.of(["b", "a"]) != ListValue.of(["a", "b"])


class TestTfsdk:
    def test_round_trip(self):
        attrs = {
            "id": "x",
            "count": 3,
            "enabled": True,
            "tags": ["a", "b"],
            "order": ["z", "y"],
            "child": [{"name": "one"}, {"name": "two"}],
        }
        model, diags = get_model(ParentModel, attrs)
        assert not diags.has_error()
        assert model.children[1].name == StringValue("two")
        assert to_state(model) == attrs

    def test_missing_attributes_decode_as_null(self):
        model, diags = get_model(ParentModel, {})
        assert not diags
        assert model.id.is_null
        assert model.children == []

    def test_type_mismatch_reports_path(self):
        model, diags = get_model(ParentModel, {"count": "three", "child": [{"name": 1}]})
        assert model is None
        paths = {d.path for d in diags.errors}
        assert paths == {"count", "child[0].name"}
        assert all(d.summary == "Value Conversion Error" for d in diags)

    def test_bool_is_not_a_number(self):
        _, diags = get_model(ParentModel, {"count": True})
        assert diags.has_error()


class TestResourceID:
    def test_make_and_split(self):
        rid = new_resource_id(int_id_field("org_id"), string_id_field("uid"))
        assert rid.make(1, "abc") == "1:abc"
        assert rid.split("1:abc") == [1, "abc"]

    def test_split_rejects_wrong_shape(self):
        rid = new_resource_id(string_id_field("stack_id"), string_id_field("job_name"))
        with pytest.raises(ResourceIDError, match="Should be in the format"):
            rid.split("only-one-part")
        with pytest.raises(ResourceIDError):
            rid.split("a:")

    def test_int_field_must_parse(self):
        rid = new_resource_id(int_id_field("org_id"), int_id_field("annotation_id"))
        with pytest.raises(ResourceIDError, match="must be an integer"):
            rid.split("1:abc")

    def test_legacy_separator_accepted(self):
        rid = new_resource_id_with_legacy_separator("grafana_cloud_access_policy_token", "/", "region", "tokenId")
        assert rid.split("us/123") == ["us", "123"]
        assert rid.split("us:123") == ["us", "123"]
        assert rid.make("us", "123") == "us:123"

    def test_single_field(self):
        rid = new_resource_id(string_id_field("datasource_uid"))
        assert rid.split("a:b") == ["a:b"]
        with pytest.raises(ResourceIDError):
            rid.split("")


class TestValidators:
    def test_size_at_least(self):
        assert size_at_least(1).validate("regions", []).has_error()
        assert not size_at_least(1).validate("regions", ["us-east-1"]).has_error()

    def test_int_between(self):
        diags = int_between(1, 5000).validate("limit", 5001)
        assert diags.has_error()
        assert "must be between 1 and 5000" in diags.errors[0].detail
        assert not int_between(1, 5000).validate("limit", 5000).has_error()

    def test_rfc3339(self):
        assert not rfc3339_time().validate("time", "2024-01-02T03:04:05Z").has_error()
        assert rfc3339_time().validate("time", "2024-01-02 03:04:05").has_error()
        assert format_rfc3339(parse_rfc3339("2024-01-02T03:04:05+00:00")) == "2024-01-02T03:04:05Z"
        assert format_rfc3339(parse_rfc3339("2024-01-02T03:04:05.120Z")) == "2024-01-02T03:04:05.120Z"
        assert format_rfc3339(parse_rfc3339("2024-01-02T03:04:05.000001Z")) == "2024-01-02T03:04:05.000001Z"

    def test_url(self):
        assert url_with_http_or_https().validate("url", "ftp://example.com").has_error()
        assert not url_with_http_or_https().validate("url", "https://example.com").has_error()

    def test_one_of(self):
        diags = one_of("basic", "bearer").validate("authentication_method", "digest")
        assert diags.errors[0].summary == "Invalid Attribute Value Match"

    def test_no_duplicate_names_case_insensitive(self):
        validator = no_duplicate_names("Duplicate metric name", case_insensitive=True)
        diags = validator.validate("metric", [{"name": "CPU"}, {"name": "cpu"}])
        assert diags.errors[0].path == "metric[1].name"


class TestSchema:
    schema = Schema(
        attributes={
            "id": StringAttribute(computed=True),
            "name": StringAttribute(required=True),
            "enabled": BoolAttribute(optional=True, default=True, description="Enabled."),
            "count": Int64Attribute(optional=True, conflicts_with=("tags",)),
            "tags": ListAttribute(optional=True),
        },
        blocks={"child": Block(attributes={"name": StringAttribute(required=True)})},
    )

    def test_validate_reports_each_problem(self):
        diags = self.schema.validate({"id": "x", "count": "1", "bogus": 1, "child": [{}]})
        summaries = {(d.summary, d.path) for d in diags}
        assert ("Missing required argument", "name") in summaries
        assert ("Invalid Configuration for Read-Only Attribute", "id") in summaries
        assert ("Incorrect attribute value type", "count") in summaries
        assert ("Unsupported argument", "bogus") in summaries
        assert ("Missing required argument", "child[0].name") in summaries

    def test_conflicts_with(self):
        diags = self.schema.validate({"name": "a", "count": 1, "tags": ["x"]})
        assert diags.errors[0].summary == "Conflicting configuration arguments"

    def test_with_defaults_fills_every_key(self):
        planned = self.schema.with_defaults({"name": "a", "child": [{"name": "c"}]})
        assert planned == {
            "id": None,
            "name": "a",
            "enabled": True,
            "count": None,
            "tags": None,
            "child": [{"name": "c"}],
        }

    def test_descriptions_are_rendered_explicitly(self):
        markdown = self.schema.to_dict(DescriptionConfig())["attributes"]["enabled"]["description"]
        plain = self.schema.to_dict(DescriptionConfig(markdown=False))["attributes"]["enabled"]["description"]
        bare = self.schema.to_dict(DescriptionConfig(include_defaults=False))["attributes"]["enabled"]["description"]
        assert markdown == "Enabled. Defaults to `true`."
        assert plain == "Enabled. Defaults to true."
        assert bare == "Enabled."


class TestStateAndDiagnostics:
    def test_state_remove(self):
        state = State({"id": "1"})
        assert state.id == "1"
        state.remove()
        assert state.removed
        assert state.get_attribute("id", "fallback") == "fallback"

    def test_state_set_model(self):
        state = State()
        state.set(ChildModel(StringValue("n")))
        assert state.raw == {"name": "n"}

    def test_diagnostics_severity(self):
        diags = Diagnostics()
        diags.add_warning("careful")
        assert not diags.has_error()
        diags.add_error("broken", "detail", path="a.b")
        assert diags.has_error()
        assert diags.errors[0].severity is Severity.ERROR
        assert str(diags.errors[0]) == "a.b: broken: detail"
