import stat

from workstation_setup.ssh_config import (
    DEFAULT_CONFIG,
    merge_ssh_config,
    ssh_config_satisfied,
    write_ssh_config,
)

COMPLETE = """\
Host *
    AddKeysToAgent yes
    IdentityFile ~/.ssh/id_ed25519
    HashKnownHosts yes

Host build
    HostName build.internal
    User ci
"""


def test_missing_document_yields_default_template():
    text, added = merge_ssh_config(None)
    assert text == DEFAULT_CONFIG
    assert "Host github.com\n    HostName github.com\n    User git\n" in text
    assert "Host gitlab.com\n    HostName gitlab.com\n    User git\n" in text
    assert added[0] == "Host *"


def test_single_missing_directive_is_inserted_under_header():
    existing = COMPLETE.replace("    AddKeysToAgent yes\n", "")
    text, added = merge_ssh_config(existing)
    assert added == ["AddKeysToAgent yes"]
    assert text == existing.replace("Host *\n", "Host *\n    AddKeysToAgent yes\n", 1)


def test_everything_else_is_left_byte_for_byte():
    existing = COMPLETE.replace("    HashKnownHosts yes\n", "") + "# trailing comment\n"
    text, _ = merge_ssh_config(existing)
    lines = text.splitlines(keepends=True)
    assert lines.pop(1) == "    HashKnownHosts yes\n"
    assert "".join(lines) == existing


def test_complete_document_is_unchanged():
    text, added = merge_ssh_config(COMPLETE)
    assert text == COMPLETE
    assert added == []


def test_directive_present_outside_wildcard_block_counts():
    existing = "Host *\n    IdentityFile ~/.ssh/id_ed25519\n\nHost github.com\n    AddKeysToAgent no\n    HashKnownHosts no\n"
    text, added = merge_ssh_config(existing)
    assert added == []
    assert text == existing


def test_missing_header_appends_block_at_end():
    existing = "Host build\n    User ci"
    text, added = merge_ssh_config(existing)
    assert added == [
        "Host *",
        "AddKeysToAgent yes",
        "IdentityFile ~/.ssh/id_ed25519",
        "HashKnownHosts yes",
    ]
    assert text == (
        "Host build\n    User ci\n"
        "\nHost *\n"
        "    HashKnownHosts yes\n"
        "    IdentityFile ~/.ssh/id_ed25519\n"
        "    AddKeysToAgent yes\n"
    )


def test_pattern_host_is_not_the_wildcard_block():
    existing = "Host *.corp\n    User me\n"
    text, added = merge_ssh_config(existing)
    assert added[0] == "Host *"
    assert text.startswith(existing)


def test_merge_is_idempotent():
    for existing in (None, "", "Host build\n    User ci\n", COMPLETE[:40]):
        once, _ = merge_ssh_config(existing)
        twice, added = merge_ssh_config(once)
        assert twice == once
        assert added == []


def test_write_creates_file_with_owner_only_mode(tmp_path):
    path = tmp_path / "config"
    message = write_ssh_config(path)
    assert path.read_text() == DEFAULT_CONFIG
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert message.startswith("Created")
    assert ssh_config_satisfied(path)


def test_write_tightens_mode_on_complete_file(tmp_path):
    path = tmp_path / "config"
    path.write_text(COMPLETE)
    path.chmod(0o644)
    assert not ssh_config_satisfied(path)
    write_ssh_config(path)
    assert path.read_text() == COMPLETE
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert ssh_config_satisfied(path)


def test_satisfied_requires_file(tmp_path):
    assert not ssh_config_satisfied(tmp_path / "missing")


def test_crlf_document_keeps_its_line_endings():
    merged, _ = merge_ssh_config("Host *\r\n    User me\r\n")
    assert merged == (
        "Host *\r\n"
        "    HashKnownHosts yes\r\n"
        "    IdentityFile ~/.ssh/id_ed25519\r\n"
        "    AddKeysToAgent yes\r\n"
        "    User me\r\n"
    )


def test_crlf_document_without_header_gets_crlf_block():
    merged, _ = merge_ssh_config("Host build\r\n    User ci\r\n")
    assert merged.startswith("Host build\r\n    User ci\r\n\r\nHost *\r\n")
    assert "\n" not in merged.replace("\r\n", "")


def test_non_utf8_bytes_survive_the_merge(tmp_path):
    path = tmp_path / "config"
    path.write_bytes(b"# caf\xe9 server\nHost *\n    AddKeysToAgent yes\n")
    assert not ssh_config_satisfied(path)

    write_ssh_config(path)

    assert path.read_bytes() == (
        b"# caf\xe9 server\n"
        b"Host *\n"
        b"    HashKnownHosts yes\n"
        b"    IdentityFile ~/.ssh/id_ed25519\n"
        b"    AddKeysToAgent yes\n"
    )
    assert ssh_config_satisfied(path)
