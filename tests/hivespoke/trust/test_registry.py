"""Tests for the allowed-signers registry."""

import pytest

from hivespoke.errors import PreconditionError
from hivespoke.trust import AllowedSignerEntry, load_registry, parse_registry

REGISTRY_TEXT = """\
# hive trust anchors

alice@example.com ssh-ed25519 AAAA123 alice laptop
bob@example.com ssh-ed25519 BBBB456
"""


class TestParseRegistry:
    def test_skips_blank_and_comment_lines(self):
        registry = parse_registry(REGISTRY_TEXT)

        assert list(registry) == ["alice@example.com", "bob@example.com"]

    def test_reconstructs_public_key_from_remaining_tokens(self):
        entry = parse_registry(REGISTRY_TEXT)["alice@example.com"]

        assert entry == AllowedSignerEntry(
            email="alice@example.com",
            key_type="ssh-ed25519",
            public_key="ssh-ed25519 AAAA123 alice laptop",
        )

    def test_short_lines_are_dropped(self):
        registry = parse_registry("carol@example.com ssh-ed25519\nbob@example.com ssh-ed25519 BBBB\n")

        assert list(registry) == ["bob@example.com"]

    def test_collapses_whitespace(self):
        registry = parse_registry("  dave@example.com\tssh-ed25519   DDDD   extra  \n")

        assert registry["dave@example.com"].public_key == "ssh-ed25519 DDDD extra"

    def test_repeated_email_overwrites_in_place(self):
        registry = parse_registry(
            "a@x ssh-ed25519 AAAA\nb@x ssh-ed25519 BBBB\na@x ssh-ed25519 CCCC\n"
        )

        assert list(registry) == ["a@x", "b@x"]
        assert registry["a@x"].public_key == "ssh-ed25519 CCCC"

    def test_empty_text(self):
        assert len(parse_registry("")) == 0

    def test_registry_is_read_only(self):
        registry = parse_registry(REGISTRY_TEXT)

        with pytest.raises(TypeError):
            registry["eve@example.com"] = None

    def test_ambiguous_keys(self):
        registry = parse_registry(
            "a@x ssh-ed25519 SAME one\nb@x ssh-ed25519 SAME two\nc@x ssh-ed25519 OTHER\n"
        )

        assert registry.ambiguous_keys() == {"ssh-ed25519 SAME": ["a@x", "b@x"]}


class TestLoadRegistry:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "allowed-signers"
        path.write_text(REGISTRY_TEXT)

        assert len(load_registry(path)) == 2

    def test_missing_file_is_precondition_error(self, tmp_path):
        with pytest.raises(PreconditionError) as exc_info:
            load_registry(tmp_path / "nope")

        assert "allowed-signers file not found" in exc_info.value.message
