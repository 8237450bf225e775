"""Tests for the l2genesis command line."""

import json

import pytest

from l2genesis.main import build_parser, main

from tests.fixtures.artifacts import write_artifacts
from tests.fixtures.config import L1_DEPLOYMENTS, deploy_config_json


@pytest.fixture
def inputs(tmp_path):
    config_dir = tmp_path / "deploy-config"
    config_dir.mkdir()
    (config_dir / "devnetL1.json").write_text(json.dumps(deploy_config_json(enableGovernance=True)))

    l1 = tmp_path / "l1-deployments.json"
    l1.write_text(json.dumps(L1_DEPLOYMENTS))

    artifacts = write_artifacts(tmp_path / "forge-artifacts")
    return {
        "config_dir": config_dir,
        "l1": l1,
        "artifacts": artifacts,
        "outfile": tmp_path / "out" / "allocs-l2.json",
    }


def argv(inputs, *extra):
    return [
        "--deploy-config-dir", str(inputs["config_dir"]),
        "--l1-deployments", str(inputs["l1"]),
        "--artifacts", str(inputs["artifacts"]),
        "--outfile", str(inputs["outfile"]),
        *extra,
    ]


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([
            "--deploy-config-dir", "cfg",
            "--l1-deployments", "l1.json",
            "--artifacts", "forge-artifacts",
            "--outfile", "out.json",
        ])
        assert args.context == "devnetL1"
        assert args.log_level == "INFO"

    def test_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    def test_success(self, inputs):
        assert main(argv(inputs)) == 0
        allocs = json.loads(inputs["outfile"].read_text())
        assert "0x" + "42" + "00" * 17 + "0042" in allocs
        assert len(allocs) > 2048

    def test_deterministic_output(self, inputs, tmp_path):
        assert main(argv(inputs)) == 0
        first = inputs["outfile"].read_bytes()
        assert main(argv(inputs, "--log-level", "DEBUG")) == 0
        assert inputs["outfile"].read_bytes() == first

    def test_missing_l1_dependency(self, inputs):
        data = dict(L1_DEPLOYMENTS)
        del data["L1StandardBridgeProxy"]
        inputs["l1"].write_text(json.dumps(data))
        assert main(argv(inputs)) == 1
        assert not inputs["outfile"].exists()

    def test_invalid_integer(self, inputs):
        config = deploy_config_json(devAccountFundAmount="lots")
        (inputs["config_dir"] / "devnetL1.json").write_text(json.dumps(config))
        assert main(argv(inputs)) == 1
        assert not inputs["outfile"].exists()

    def test_invalid_l1_deployments_json(self, inputs):
        inputs["l1"].write_text("{")
        assert main(argv(inputs)) == 1
        assert not inputs["outfile"].exists()

    def test_missing_context(self, inputs):
        assert main(argv(inputs, "--context", "mainnet")) == 1
        assert not inputs["outfile"].exists()

    def test_missing_artifact(self, inputs):
        (inputs["artifacts"] / "EAS.sol" / "EAS.json").unlink()
        assert main(argv(inputs)) == 1
        assert not inputs["outfile"].exists()
