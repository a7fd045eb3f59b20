"""
Unit tests for build event log parsing.
"""
import pytest

from periphery_runner.bep import extract_index_stores, read_event_log
from periphery_runner.errors import BuildFailure


def _uri_line(path):
    return f'  uri: "file://{path}"\n'


def test_extract_distinct_stores_with_duplicates():
    """N distinct stores plus M repeats of one should yield exactly N paths."""
    paths = [f"/execroot/bazel-out/mod{i}.indexstore" for i in range(4)]
    text = "".join(_uri_line(p) for p in paths)
    text += _uri_line(paths[1]) * 3

    stores = extract_index_stores(text)

    assert stores == paths


def test_extract_preserves_first_appearance_order():
    text = (
        _uri_line("/b/second.indexstore")
        + _uri_line("/a/first.indexstore")
        + _uri_line("/b/second.indexstore")
    )

    assert extract_index_stores(text) == ["/b/second.indexstore", "/a/first.indexstore"]


def test_extract_no_matches():
    text = (
        'important_output {\n'
        '  name: "app.swiftmodule"\n'
        '  uri: "file:///execroot/bazel-out/app.swiftmodule"\n'
        '}\n'
    )

    assert extract_index_stores(text) == []


def test_extract_ignores_non_file_uris():
    text = 'uri: "bytestream://remote/blobs/x.indexstore"\n' + _uri_line("/local/x.indexstore")

    assert extract_index_stores(text) == ["/local/x.indexstore"]


def test_extract_keeps_spaces_in_path():
    text = _uri_line("/Users/dev/My Project/out/app.indexstore")

    assert extract_index_stores(text) == ["/Users/dev/My Project/out/app.indexstore"]


def test_extract_stops_at_indexstore_suffix():
    """The captured path ends at the .indexstore suffix, not at the closing quote."""
    text = 'uri: "file:///out/app.indexstore/v5/units"\n'

    assert extract_index_stores(text) == ["/out/app.indexstore"]


def test_read_event_log(tmp_path):
    log = tmp_path / "periphery_bep.text"
    log.write_text(_uri_line("/x/store.indexstore"))

    assert "store.indexstore" in read_event_log(log)


def test_read_event_log_missing(tmp_path):
    with pytest.raises(BuildFailure):
        read_event_log(tmp_path / "missing.text")
