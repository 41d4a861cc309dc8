"""Tests for onedriver.ssh module."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from onedriver import ssh
from onedriver.exceptions import ManagerError, SSHTimeoutError


class TestGenerateSshKey:
    def test_existing_key_is_kept(self, tmp_path):
        key = tmp_path / "id_rsa"
        key.write_text("private")
        with patch("onedriver.ssh.run") as mock_run:
            ssh.generate_ssh_key(key)
        mock_run.assert_not_called()

    def test_runs_ssh_keygen(self, tmp_path):
        key = tmp_path / "machines" / "vm1" / "id_rsa"

        def fake_keygen(cmd, **kwargs):
            key.write_text("private")
            return MagicMock(returncode=0, stdout="", stderr="")

        with patch("onedriver.ssh.run", side_effect=fake_keygen) as mock_run:
            ssh.generate_ssh_key(key)
        cmd = mock_run.call_args[0][0]
        assert cmd[0] == "ssh-keygen"
        assert cmd[cmd.index("-t") + 1] == "rsa"
        assert cmd[cmd.index("-N") + 1] == ""
        assert cmd[-1] == str(key)
        assert key.parent.is_dir()
        assert key.stat().st_mode & 0o777 == 0o600

    def test_failure_raises(self, tmp_path):
        key = tmp_path / "id_rsa"
        result = MagicMock(returncode=1, stdout="", stderr="bad path")
        with patch("onedriver.ssh.run", return_value=result):
            with pytest.raises(ManagerError, match="bad path"):
                ssh.generate_ssh_key(key)

    def test_missing_binary(self, tmp_path):
        with patch("onedriver.ssh.run", side_effect=FileNotFoundError("ssh-keygen")):
            with pytest.raises(ManagerError, match="ssh-keygen not found"):
                ssh.generate_ssh_key(tmp_path / "id_rsa")


class TestReadPublicKey:
    def test_reads_pub_file_verbatim(self, tmp_path):
        key = tmp_path / "id_rsa"
        (tmp_path / "id_rsa.pub").write_text("ssh-rsa AAAA me@host\n")
        assert ssh.read_public_key(key) == "ssh-rsa AAAA me@host\n"

    def test_missing_pub_file(self, tmp_path):
        with pytest.raises(ManagerError, match="Failed to read SSH public key"):
            ssh.read_public_key(tmp_path / "id_rsa")


def _connection(banner: bytes) -> MagicMock:
    sock = MagicMock()
    sock.recv.return_value = banner
    conn = MagicMock()
    conn.__enter__.return_value = sock
    return conn


class TestSshBannerReady:
    def test_banner(self):
        with patch("onedriver.ssh.socket.create_connection", return_value=_connection(b"SSH-2.0-OpenSSH_9.6\r\n")) as mock_conn:
            assert ssh.ssh_banner_ready("10.0.0.5", 22, timeout=1.0) is True
        mock_conn.assert_called_once_with(("10.0.0.5", 22), timeout=1.0)

    def test_wrong_banner(self):
        with patch("onedriver.ssh.socket.create_connection", return_value=_connection(b"HTTP/1.1 400")):
            assert ssh.ssh_banner_ready("10.0.0.5") is False

    def test_connection_refused(self):
        with patch("onedriver.ssh.socket.create_connection", side_effect=ConnectionRefusedError()):
            assert ssh.ssh_banner_ready("10.0.0.5") is False


class TestWaitForSsh:
    def test_ready_after_retries(self):
        with (
            patch("onedriver.ssh.ssh_banner_ready", side_effect=[False, False, True]) as mock_ready,
            patch("onedriver.utils.time.sleep") as mock_sleep,
        ):
            ssh.wait_for_ssh("10.0.0.5", attempts=5, interval=3.0)
        assert mock_ready.call_count == 3
        assert mock_sleep.call_count == 2

    def test_timeout(self):
        with (
            patch("onedriver.ssh.ssh_banner_ready", return_value=False),
            patch("onedriver.utils.time.sleep"),
        ):
            with pytest.raises(SSHTimeoutError, match="SSH on 10.0.0.5:22"):
                ssh.wait_for_ssh("10.0.0.5", attempts=4, interval=3.0)
