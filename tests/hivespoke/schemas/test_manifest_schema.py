"""Tests for the Manifest schema."""

import copy

import pytest

from hivespoke.schemas import Manifest, validate_manifest


def _messages(result):
    return {v.path: v.message for v in result.violations}


class TestManifestValid:
    def test_valid_manifest(self, manifest_data):
        result = validate_manifest(manifest_data)

        assert result.ok
        assert result.violations == ()
        manifest = result.document
        assert isinstance(manifest, Manifest)
        assert manifest.identity.handle == "alice"
        assert manifest.security.reflexes.signing is True
        assert manifest.status.test == "pytest -q"

    def test_security_defaults_to_all_false(self, manifest_data):
        del manifest_data["security"]

        manifest = validate_manifest(manifest_data).document

        assert manifest.security.reflexes.claims() == [
            ("signing", False),
            ("secretScanning", False),
            ("sandboxEnforcer", False),
            ("contentFilter", False),
        ]

    def test_partial_reflexes_default_missing_to_false(self, manifest_data):
        manifest_data["security"] = {"reflexes": {"signing": True}}

        reflexes = validate_manifest(manifest_data).document.security.reflexes

        assert reflexes.signing is True
        assert reflexes.content_filter is False

    def test_unknown_keys_are_ignored(self, manifest_data):
        manifest_data["futureField"] = {"anything": 1}

        assert validate_manifest(manifest_data).ok

    @pytest.mark.parametrize(
        "hub", ["mellanon/pai-collab", "org_1/repo.name", "a-b/c"]
    )
    def test_hub_formats_accepted(self, manifest_data, hub):
        manifest_data["hub"] = hub
        assert validate_manifest(manifest_data).ok

    def test_validation_is_idempotent(self, manifest_data):
        first = validate_manifest(manifest_data).document
        second = validate_manifest(copy.deepcopy(manifest_data)).document

        assert first == second

    def test_documents_are_immutable(self, manifest_data):
        manifest = validate_manifest(manifest_data).document

        with pytest.raises(Exception):
            manifest.name = "other"

    def test_round_trips_published_key_names(self, manifest_data):
        dumped = validate_manifest(manifest_data).document.to_yaml_dict()

        assert dumped["schemaVersion"] == "1.0"
        assert dumped["identity"]["publicKey"] == manifest_data["identity"]["publicKey"]
        assert "secretScanning" in dumped["security"]["reflexes"]


class TestManifestViolations:
    def test_hub_without_slash(self, manifest_data):
        manifest_data["hub"] = "not-a-hub"

        result = validate_manifest(manifest_data)

        assert not result.ok
        assert result.document is None
        assert _messages(result) == {"hub": "Hub must be in org/repo format"}

    def test_missing_hub(self, manifest_data):
        del manifest_data["hub"]

        assert _messages(validate_manifest(manifest_data)) == {"hub": "Required"}

    def test_rsa_public_key_rejected(self, manifest_data):
        manifest_data["identity"]["publicKey"] = "ssh-rsa AAAAB3NzaC1yc2E"

        messages = _messages(validate_manifest(manifest_data))

        assert messages == {"identity.publicKey": "Public key must be an Ed25519 SSH key"}

    def test_empty_name(self, manifest_data):
        manifest_data["name"] = ""

        assert _messages(validate_manifest(manifest_data)) == {
            "name": "Project name is required"
        }

    def test_maintainer_must_be_handle(self, manifest_data):
        manifest_data["maintainer"] = "alice smith"

        assert _messages(validate_manifest(manifest_data)) == {
            "maintainer": "Maintainer must be a valid GitHub handle"
        }

    def test_license_lists_allowed_values(self, manifest_data):
        manifest_data["license"] = "GPL-2.0"

        message = _messages(validate_manifest(manifest_data))["license"]

        assert message.startswith("License must be one of:")
        assert "Apache-2.0" in message
        assert "AGPL-3.0" in message

    def test_bad_fingerprint(self, manifest_data):
        manifest_data["identity"]["fingerprint"] = "MD5:aa:bb"

        assert "identity.fingerprint" in _messages(validate_manifest(manifest_data))

    def test_wrong_schema_version(self, manifest_data):
        manifest_data["schemaVersion"] = "2.0"

        assert "schemaVersion" in _messages(validate_manifest(manifest_data))

    def test_string_boolean_is_not_coerced(self, manifest_data):
        manifest_data["security"]["reflexes"]["signing"] = "true"

        assert "security.reflexes.signing" in _messages(validate_manifest(manifest_data))

    def test_missing_identity_is_required(self, manifest_data):
        del manifest_data["identity"]

        assert _messages(validate_manifest(manifest_data)) == {"identity": "Required"}

    def test_reports_every_violation(self, manifest_data):
        manifest_data["hub"] = "bad"
        manifest_data["license"] = "WTFPL"
        manifest_data["identity"]["publicKey"] = "ssh-rsa AAAA"

        paths = [v.path for v in validate_manifest(manifest_data).violations]

        assert paths == ["hub", "license", "identity.publicKey"]

    def test_empty_test_command(self, manifest_data):
        manifest_data["status"] = {"test": ""}

        assert "status.test" in _messages(validate_manifest(manifest_data))

    @pytest.mark.parametrize("raw", [None, "just a string", ["a", "list"], 42])
    def test_non_mapping_input_never_raises(self, raw):
        result = validate_manifest(raw)

        assert not result.ok
        assert result.violations
