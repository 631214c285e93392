"""
Tests for the streams module (input selection and atomic output).
"""

import io
import os
import stat
import tempfile
from pathlib import Path

import pytest
from envq.core.streams import MissingInputError, atomic_write, read_input, write_output


class FakeTerminal(io.StringIO):
    """A stdin stand-in that claims to be a terminal."""

    def isatty(self):
        return True


class TestReadInput:
    """Test choosing between a file and stdin."""

    def test_reads_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            env_path = Path(tmpdir) / ".env"
            env_path.write_text("KEY=value\n")

            assert read_input(str(env_path)) == "KEY=value\n"

    def test_file_wins_over_stdin(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            env_path = Path(tmpdir) / ".env"
            env_path.write_text("FROM=file\n")

            assert read_input(str(env_path), io.StringIO("FROM=stdin\n")) == "FROM=file\n"

    def test_reads_piped_stdin(self):
        assert read_input(None, io.StringIO("KEY=value\n")) == "KEY=value\n"

    def test_terminal_stdin_is_missing_input(self):
        """No file and nothing piped is reported as missing input."""
        with pytest.raises(MissingInputError, match="Missing file or stdin"):
            read_input(None, FakeTerminal())

    def test_lone_carriage_return_kept_in_file(self, tmp_path):
        """A '\\r' inside a line is not turned into a line break."""
        env_path = tmp_path / ".env"
        env_path.write_bytes(b"A=x\ry\nB=2\n")

        assert read_input(str(env_path)) == "A=x\ry\nB=2\n"

    def test_lone_carriage_return_kept_on_stdin(self):
        stdin = io.TextIOWrapper(io.BytesIO(b"A=1\rB=2\nC=3\n"))
        assert read_input(None, stdin) == "A=1\rB=2\nC=3\n"

    def test_invalid_utf8_file(self, tmp_path):
        env_path = tmp_path / ".env"
        env_path.write_bytes(b"A=\xff\xfe\n")

        with pytest.raises(UnicodeDecodeError):
            read_input(str(env_path))

    def test_missing_file_raises_oserror(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(FileNotFoundError):
                read_input(str(Path(tmpdir) / "nope.env"))


class TestAtomicWrite:
    """Test write-to-temp-then-rename file output."""

    def test_replaces_content(self, tmp_path):
        env_path = tmp_path / ".env"
        env_path.write_text("OLD=1\n")

        atomic_write(env_path, "NEW=2\n")

        assert env_path.read_text() == "NEW=2\n"

    def test_creates_missing_file(self, tmp_path):
        env_path = tmp_path / ".env"
        atomic_write(env_path, "KEY=value\n")
        assert env_path.read_text() == "KEY=value\n"

    def test_leaves_no_temp_files(self, tmp_path):
        env_path = tmp_path / ".env"
        env_path.write_text("OLD=1\n")

        atomic_write(env_path, "NEW=2\n")

        assert sorted(p.name for p in tmp_path.iterdir()) == [".env"]

    def test_writes_carriage_returns_verbatim(self, tmp_path):
        """No newline translation happens on the way out."""
        env_path = tmp_path / ".env"
        atomic_write(env_path, "A=1\rB=2\nC=4\n")
        assert env_path.read_bytes() == b"A=1\rB=2\nC=4\n"

    def test_syncs_before_replace(self, tmp_path, monkeypatch):
        """Data reaches the disk before the rename."""
        env_path = tmp_path / ".env"
        env_path.write_text("OLD=1\n")
        calls = []
        real_fsync = os.fsync
        real_replace = os.replace

        def recording_fsync(fd):
            calls.append("fsync")
            real_fsync(fd)

        def recording_replace(src, dst):
            calls.append("replace")
            real_replace(src, dst)

        monkeypatch.setattr(os, "fsync", recording_fsync)
        monkeypatch.setattr(os, "replace", recording_replace)

        atomic_write(env_path, "NEW=2\n")

        assert calls == ["fsync", "replace"]
        assert env_path.read_text() == "NEW=2\n"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_preserves_mode(self, tmp_path):
        env_path = tmp_path / ".env"
        env_path.write_text("OLD=1\n")
        env_path.chmod(0o600)

        atomic_write(env_path, "NEW=2\n")

        assert stat.S_IMODE(env_path.stat().st_mode) == 0o600

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_mode_not_copied_when_disabled(self, tmp_path):
        """mkstemp creates files readable by the owner only."""
        env_path = tmp_path / ".env"
        env_path.write_text("OLD=1\n")
        env_path.chmod(0o644)

        atomic_write(env_path, "NEW=2\n", preserve_mode=False)

        assert stat.S_IMODE(env_path.stat().st_mode) == 0o600

    def test_failed_write_keeps_original(self, tmp_path, monkeypatch):
        """A failure before the rename leaves the original file intact."""
        env_path = tmp_path / ".env"
        env_path.write_text("OLD=1\n")

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)

        with pytest.raises(OSError, match="disk full"):
            atomic_write(env_path, "NEW=2\n")

        assert env_path.read_text() == "OLD=1\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == [".env"]


class TestWriteOutput:
    """Test choosing between a file and stdout."""

    def test_writes_stdout_without_file(self):
        out = io.StringIO()
        write_output(None, "KEY=value\n", stdout=out)
        assert out.getvalue() == "KEY=value\n"

    def test_writes_file(self, tmp_path):
        env_path = tmp_path / ".env"
        env_path.write_text("KEY=old\n")
        out = io.StringIO()

        write_output(str(env_path), "KEY=new\n", stdout=out)

        assert env_path.read_text() == "KEY=new\n"
        assert out.getvalue() == ""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
