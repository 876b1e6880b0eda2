"""Unit tests for the CLI — Typer command registration and basic behavior.

Exercises command registration, help output, and end-to-end command runs
against a respx-mocked content server via typer.testing.CliRunner.
"""

from __future__ import annotations

import json

import respx
from typer.testing import CliRunner

from scenecast.cli.app import app
from scenecast.core.bundle import read_bundle
from scenecast.models.auth import AuthChain

runner = CliRunner()

URL = "http://content.test"

COMMANDS = [
    "prepare",
    "submit",
    "status",
    "snapshot",
    "exists",
    "download",
    "audit",
    "failed",
    "challenge",
]


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    """The CLI must register all expected commands and show help."""

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_lists_every_command(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in COMMANDS:
            assert command in result.output

    def test_each_command_has_help(self):
        for command in COMMANDS:
            result = runner.invoke(app, [command, "--help"])
            assert result.exit_code == 0, command


# ---------------------------------------------------------------------------
# Test: deployment commands
# ---------------------------------------------------------------------------


class TestPrepareAndSubmit:
    def test_prepare_writes_bundle(self, tmp_path):
        source = tmp_path / "scene"
        source.mkdir()
        (source / "scene.json").write_bytes(b"{}")
        out = tmp_path / "bundle"

        with respx.mock(assert_all_called=True) as router:
            router.post(f"{URL}/content/entities/active").respond(200, json=[])
            result = runner.invoke(
                app,
                ["prepare", str(source), "-p", "0, 0", "-o", str(out), "-s", URL],
            )

        assert result.exit_code == 0, result.output
        entity_id, files = read_bundle(out)
        assert entity_id in result.output
        assert files[-1].cid == entity_id
        assert len(files) == 2

    def test_prepare_rejects_bad_pointer(self, tmp_path):
        result = runner.invoke(
            app, ["prepare", str(tmp_path), "-p", "zero", "-o", str(tmp_path / "b")]
        )
        assert result.exit_code == 1
        assert "Invalid pointer" in result.output

    def test_prepare_server_failure(self, tmp_path):
        with respx.mock(assert_all_called=True) as router:
            router.post(f"{URL}/content/entities/active").respond(500)
            result = runner.invoke(
                app, ["prepare", str(tmp_path), "-p", "0,0", "-o", str(tmp_path / "b"), "-s", URL]
            )
        assert result.exit_code == 1

    def test_submit_prepared_bundle(self, tmp_path):
        source = tmp_path / "scene"
        source.mkdir()
        (source / "scene.json").write_bytes(b"{}")
        out = tmp_path / "bundle"

        with respx.mock(assert_all_called=True) as router:
            router.post(f"{URL}/content/entities/active").respond(200, json=[])
            runner.invoke(app, ["prepare", str(source), "-p", "0,0", "-o", str(out), "-s", URL])
            entity_id, _ = read_bundle(out)

            chain_file = tmp_path / "chain.json"
            chain_file.write_bytes(AuthChain.simple("0xsigner", entity_id, "0xsig").to_json())
            router.post(f"{URL}/content/entities").respond(
                200, json={"creationTimestamp": 99}
            )
            result = runner.invoke(
                app, ["submit", str(out), "--auth-chain", str(chain_file), "-s", URL]
            )

        assert result.exit_code == 0, result.output
        assert "Deployed" in result.output
        assert "99" in result.output

    def test_submit_empty_auth_chain(self, tmp_path):
        source = tmp_path / "scene"
        source.mkdir()
        out = tmp_path / "bundle"
        chain_file = tmp_path / "chain.json"
        chain_file.write_text("[]")

        with respx.mock() as router:
            router.post(f"{URL}/content/entities/active").respond(200, json=[])
            runner.invoke(app, ["prepare", str(source), "-p", "0,0", "-o", str(out), "-s", URL])
            result = runner.invoke(
                app, ["submit", str(out), "--auth-chain", str(chain_file), "-s", URL]
            )

        assert result.exit_code == 1
        assert "Deployment failed" in result.output

    def test_submit_missing_bundle(self, tmp_path):
        chain_file = tmp_path / "chain.json"
        chain_file.write_text("[]")
        result = runner.invoke(
            app, ["submit", str(tmp_path / "nowhere"), "--auth-chain", str(chain_file)]
        )
        assert result.exit_code == 1
        assert "Cannot read bundle" in result.output


# ---------------------------------------------------------------------------
# Test: query commands
# ---------------------------------------------------------------------------


class TestQueryCommands:
    def test_challenge(self):
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{URL}/content/challenge").respond(
                200, json={"challengeText": "peer-text"}
            )
            result = runner.invoke(app, ["challenge", "-s", URL])
        assert result.exit_code == 0
        assert "peer-text" in result.output

    def test_status_server_error_exits_1(self):
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{URL}/content/status").respond(503)
            result = runner.invoke(app, ["status", "-s", URL])
        assert result.exit_code == 1
        assert "Request failed" in result.output

    def test_exists(self):
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{URL}/content/available-content/").respond(
                200, json=[{"cid": "cid-a", "available": True}]
            )
            result = runner.invoke(app, ["exists", "cid-a", "-s", URL])
        assert result.exit_code == 0
        assert "cid-a" in result.output

    def test_download(self, tmp_path):
        target = tmp_path / "out" / "file.bin"
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{URL}/content/contents/cid-a").respond(200, content=b"data")
            result = runner.invoke(app, ["download", "cid-a", str(target), "-s", URL])
        assert result.exit_code == 0
        assert target.read_bytes() == b"data"

    def test_audit(self):
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{URL}/content/audit/scene/bafkreis").respond(
                200,
                json={
                    "version": "v3",
                    "localTimestamp": 1,
                    "authChain": [{"type": "SIGNER", "payload": "0xowner", "signature": ""}],
                },
            )
            result = runner.invoke(app, ["audit", "scene", "bafkreis", "-s", URL])
        assert result.exit_code == 0
        assert "0xowner" in result.output

    def test_failed_none(self):
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{URL}/content/failed-deployments").respond(200, json=[])
            result = runner.invoke(app, ["failed", "-s", URL])
        assert result.exit_code == 0
        assert "No failed deployments" in result.output

    def test_snapshot(self):
        body = {"entities": {"scene": {"hash": "bafyscene", "lastIncludedDeploymentTimestamp": 7}}}
        with respx.mock(assert_all_called=True) as router:
            router.get(f"{URL}/content/snapshot").respond(200, text=json.dumps(body))
            result = runner.invoke(app, ["snapshot", "-s", URL])
        assert result.exit_code == 0
        assert "bafyscene" in result.output
