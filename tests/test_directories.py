# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for directory provisioning."""

import os
import stat

import pytest

from genro_datastore import ensure_dir


class TestEnsureDir:
    """Tests for ensure_dir."""

    def test_creates_nested_directories(self, tmp_path):
        """Test every missing level is created."""
        target = tmp_path / 'a' / 'b' / 'c'
        result = ensure_dir(target, cwd=tmp_path)
        assert result == target
        assert target.is_dir()

    def test_idempotent(self, tmp_path):
        """Test calling twice on an existing tree succeeds."""
        target = tmp_path / 'a' / 'b'
        ensure_dir(target, cwd=tmp_path)
        ensure_dir(target, cwd=tmp_path)
        assert target.is_dir()

    def test_relative_to_cwd(self, tmp_path):
        """Test relative paths are resolved from cwd."""
        result = ensure_dir('x/y', cwd=tmp_path)
        assert result == tmp_path / 'x' / 'y'
        assert (tmp_path / 'x' / 'y').is_dir()

    def test_default_cwd(self, tmp_path, monkeypatch):
        """Test the current directory is the default starting point."""
        monkeypatch.chdir(tmp_path)
        ensure_dir('one/two')
        assert (tmp_path / 'one' / 'two').is_dir()

    def test_target_outside_cwd(self, tmp_path):
        """Test a target outside cwd is walked from the filesystem root."""
        cwd = tmp_path / 'work'
        cwd.mkdir()
        target = tmp_path / 'elsewhere' / 'deep'
        ensure_dir(target, cwd=cwd)
        assert target.is_dir()

    def test_existing_file_raises(self, tmp_path):
        """Test a regular file in the way is not accepted."""
        (tmp_path / 'blocker').write_text('x')
        with pytest.raises(FileExistsError):
            ensure_dir(tmp_path / 'blocker' / 'sub', cwd=tmp_path)

    def test_mode(self, tmp_path):
        """Test the mode is applied to created directories."""
        target = tmp_path / 'private'
        ensure_dir(target, mode=0o700, cwd=tmp_path)
        assert stat.S_IMODE(target.stat().st_mode) == 0o700

    def test_concurrent_creation_is_tolerated(self, tmp_path, monkeypatch):
        """Test a directory created by someone else between levels is fine."""
        real_mkdir = os.mkdir
        target = tmp_path / 'race' / 'leaf'

        def racing_mkdir(path, mode=0o777):
            if str(path) == str(target):
                # Another process wins the race on the last level
                real_mkdir(path, mode)
                raise FileExistsError(17, 'File exists', str(path))
            return real_mkdir(path, mode)

        monkeypatch.setattr(os, 'mkdir', racing_mkdir)
        assert ensure_dir(target, cwd=tmp_path) == target
        assert target.is_dir()

    def test_other_errors_propagate(self, tmp_path, monkeypatch):
        """Test errors other than an existing directory are raised."""
        def denied(path, mode=0o777):
            raise PermissionError(13, 'Permission denied', str(path))

        monkeypatch.setattr(os, 'mkdir', denied)
        with pytest.raises(PermissionError):
            ensure_dir(tmp_path / 'nope', cwd=tmp_path)
