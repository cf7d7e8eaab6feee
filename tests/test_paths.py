# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for dotted path parsing."""

import pytest

from genro_datastore.paths import escape_key, join_path, split_path, strip_escapes


class TestSplitPath:
    """Tests for split_path."""

    def test_single_segment(self):
        """Test a path without dots."""
        assert split_path('name') == ['name']

    def test_nested_segments(self):
        """Test splitting on every dot."""
        assert split_path('config.database.host') == ['config', 'database', 'host']

    def test_empty_path(self):
        """Test the empty path addresses the whole tree."""
        assert split_path('') == []

    def test_escaped_dot_is_not_a_separator(self):
        """Test backslash-dot stays inside the segment, unescaped."""
        assert split_path('a\\.b') == ['a.b']
        assert split_path('servers.www\\.example\\.com.port') == [
            'servers', 'www.example.com', 'port',
        ]

    def test_no_normalization(self):
        """Test whitespace, case and empty segments are preserved."""
        assert split_path(' A . b ') == [' A ', ' b ']
        assert split_path('a..b') == ['a', '', 'b']

    def test_backslash_not_before_dot_is_kept(self):
        """Test only backslashes escaping a dot are removed."""
        assert split_path('C:\\temp.x') == ['C:\\temp', 'x']

    def test_deterministic(self):
        """Test the same path always yields the same segments."""
        assert split_path('a.b\\.c') == split_path('a.b\\.c')

    def test_non_string_raises(self):
        """Test a non-string path is rejected."""
        with pytest.raises(TypeError, match="string"):
            split_path(['a', 'b'])
        with pytest.raises(TypeError):
            split_path(None)


class TestEscaping:
    """Tests for escape_key, strip_escapes and join_path."""

    def test_strip_escapes(self):
        """Test escape removal on a single segment."""
        assert strip_escapes('www\\.example\\.com') == 'www.example.com'

    def test_escape_key(self):
        """Test dots of a key are escaped."""
        assert escape_key('www.example.com') == 'www\\.example\\.com'
        assert escape_key('plain') == 'plain'

    def test_join_path(self):
        """Test joining escapes each segment."""
        assert join_path(['a', 'b.c']) == 'a.b\\.c'
        assert join_path([]) == ''

    def test_join_then_split(self):
        """Test keys with literal dots survive join and split."""
        segments = ['servers', 'www.example.com', 'port']
        assert split_path(join_path(segments)) == segments
