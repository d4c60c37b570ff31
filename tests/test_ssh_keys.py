import shutil
import stat
import subprocess

import pytest

from workstation_setup.ssh_keys import KeyPair, ensure_key_pair

requires_ssh_keygen = pytest.mark.skipif(
    shutil.which("ssh-keygen") is None, reason="ssh-keygen not installed"
)


def mode(path):
    return stat.S_IMODE(path.stat().st_mode)


def derived_public_key(private_path):
    return subprocess.run(
        ["ssh-keygen", "-y", "-f", str(private_path)],
        capture_output=True,
        text=True,
        check=True,
    ).stdout


@pytest.fixture
def pair(tmp_path):
    return KeyPair(tmp_path / "id_ed25519", "test@example.com")


def test_public_path_sits_next_to_private(pair, tmp_path):
    assert pair.public_path == tmp_path / "id_ed25519.pub"
    assert not pair.is_complete()


@requires_ssh_keygen
def test_generate_creates_pair_with_expected_modes(pair):
    message = ensure_key_pair(pair)
    assert "Generated" in message
    assert pair.is_complete()
    assert mode(pair.private_path) == 0o600
    assert mode(pair.public_path) == 0o644
    assert pair.public_key_text().startswith("ssh-ed25519 ")
    assert pair.public_key_text().strip().endswith("test@example.com")


@requires_ssh_keygen
def test_missing_public_key_is_derived_not_regenerated(pair):
    ensure_key_pair(pair)
    private_before = pair.private_path.read_bytes()
    pair.public_path.unlink()

    message = ensure_key_pair(pair)

    assert "Recreated" in message
    assert pair.private_path.read_bytes() == private_before
    assert pair.public_key_text() == derived_public_key(pair.private_path)
    assert mode(pair.public_path) == 0o644


@requires_ssh_keygen
def test_force_replaces_existing_pair(pair):
    ensure_key_pair(pair)
    old_public = pair.public_key_text()

    ensure_key_pair(pair, force=True)

    assert pair.public_key_text() != old_public
    assert mode(pair.private_path) == 0o600
    assert mode(pair.public_path) == 0o644


@requires_ssh_keygen
def test_loose_permissions_are_repaired(pair):
    ensure_key_pair(pair)
    pair.private_path.chmod(0o644)
    assert not pair.is_complete()

    message = ensure_key_pair(pair)

    assert "Fixed permissions" in message
    assert pair.is_complete()


@requires_ssh_keygen
def test_orphaned_public_key_is_replaced(pair):
    pair.public_path.write_text("ssh-ed25519 AAAAstale old\n")
    ensure_key_pair(pair)
    assert pair.is_complete()
    assert "AAAAstale" not in pair.public_key_text()


def test_keygen_failure_propagates(pair, monkeypatch):
    def fail(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr("workstation_setup.ssh_keys.run_command", fail)
    with pytest.raises(subprocess.CalledProcessError):
        ensure_key_pair(pair)
