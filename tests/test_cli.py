import json
from unittest.mock import patch

import pytest
import respx
import yaml
from httpx import Response

from tfgrafana.cli.main import build_parser, main
from tfgrafana.cli.read import parse_assignments
from tfgrafana.cli.schema import schema_document
from tfgrafana.core.errors import ExitCode, ValidationError

SM_URL = "https://sm.example.com"

DASHBOARD_TF = (
    'resource "grafana_dashboard" "home" {\n'
    '  config_json = "{\\"title\\":\\"Home\\"}"\n'
    "  folder      = null\n"
    '  org_id      = "1"\n'
    "}\n"
)


@pytest.fixture(autouse=True)
def _quiet_logging():
    with patch("tfgrafana.cli.main.configure_logging"):
        yield


@pytest.fixture
def provider_yaml(tmp_path):
    path = tmp_path / "provider.yaml"
    path.write_text(yaml.safe_dump({"sm_access_token": "sm-token", "sm_url": SM_URL, "retries": 0}))
    return path


class TestParser:
    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_read_arguments(self):
        args = build_parser().parse_args(["read", "grafana_dashboards", "--set", "limit=10", "--set", 'tags=["a"]'])
        assert args.type_name == "grafana_dashboards"
        assert args.assignments == ["limit=10", 'tags=["a"]']


class TestSchema:
    def test_full_document(self):
        document = schema_document()
        assert "url" in document["provider"]["attributes"]
        assert "grafana_notification_policy" in document["resource_schemas"]
        assert "grafana_oncall_user" in document["data_source_schemas"]

    def test_single_type(self, capsys):
        assert main(["schema", "grafana_notification_policy"]) == 0
        document = json.loads(capsys.readouterr().out)
        assert "policy" in document["blocks"]
        assert document["attributes"]["id"]["computed"] is True

    def test_plain_descriptions(self, capsys):
        assert main(["schema", "--plain", "grafana_synthetic_monitoring_probes"]) == 0
        document = json.loads(capsys.readouterr().out)
        assert document["attributes"]["filter_deprecated"]["description"].endswith("Defaults to true.")

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            schema_document("grafana_nope")
        assert main(["schema", "grafana_nope"]) == ExitCode.VALIDATION_ERROR


class TestRead:
    def test_parse_assignments(self):
        assert parse_assignments(["limit=10", 'tags=["prod"]', "uid=abc", "expr=a=b"]) == {
            "limit": 10,
            "tags": ["prod"],
            "uid": "abc",
            "expr": "a=b",
        }
        with pytest.raises(ValidationError, match="Expected name=value"):
            parse_assignments(["novalue"])

    def test_reads_data_source(self, capsys, provider_yaml):
        with respx.mock:
            respx.get(f"{SM_URL}/api/v1/probe/list").mock(
                return_value=Response(200, json=[{"id": 1, "name": "Atlanta"}, {"id": 2, "name": "Paris"}])
            )
            code = main(["read", "grafana_synthetic_monitoring_probes", "--config", str(provider_yaml)])

        assert code == 0
        state = json.loads(capsys.readouterr().out)
        assert state["probes"] == {"Atlanta": 1, "Paris": 2}

    def test_remote_failure(self, provider_yaml):
        with respx.mock:
            respx.get(f"{SM_URL}/api/v1/probe/list").mock(return_value=Response(500, json={}))
            code = main(["read", "grafana_synthetic_monitoring_probes", "--config", str(provider_yaml)])

        assert code == ExitCode.PROVIDER_ERROR

    def test_unconfigured_client(self, provider_yaml):
        assert main(["read", "grafana_dashboards", "--config", str(provider_yaml)]) == ExitCode.PROVIDER_ERROR

    def test_unknown_data_source(self):
        assert main(["read", "grafana_nope"]) == ExitCode.VALIDATION_ERROR

    def test_missing_config_file(self, tmp_path):
        code = main(["read", "grafana_dashboards", "--config", str(tmp_path / "missing.yaml")])
        assert code == ExitCode.CONFIG_ERROR

    def test_bad_assignment(self, provider_yaml):
        code = main(["read", "grafana_oncall_user", "--set", "username", "--config", str(provider_yaml)])
        assert code == ExitCode.VALIDATION_ERROR


class TestTfgen:
    def test_strip_defaults_with_extra(self, tmp_path):
        path = tmp_path / "main.tf"
        path.write_text(DASHBOARD_TF)

        assert main(["tfgen", "strip-defaults", str(path), "--extra", 'org_id="1"']) == 0
        text = path.read_text()
        assert "folder" not in text
        assert "org_id" not in text
        assert "config_json" in text

    def test_abstract_dashboards(self, tmp_path):
        path = tmp_path / "main.tf"
        path.write_text(DASHBOARD_TF)

        assert main(["tfgen", "abstract-dashboards", str(path)]) == 0
        assert json.loads((tmp_path / "files" / "home.json").read_text()) == {"title": "Home"}

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "main.tf"
        path.write_text("resource {{{\n")
        assert main(["tfgen", "strip-defaults", str(path)]) == ExitCode.VALIDATION_ERROR

    def test_generate_postprocess(self, tmp_path):
        (tmp_path / "main.tf").write_text(DASHBOARD_TF)
        (tmp_path / "folders.tf").write_text('resource "grafana_folder" "ops" {\n  title = "Ops"\n}\n')

        code = main(["generate", "postprocess", "--output-dir", str(tmp_path), "--include", "grafana_dashboard.*"])

        assert code == 0
        assert "grafana_folder" not in (tmp_path / "folders.tf").read_text()
        assert (tmp_path / "files" / "home.json").exists()
