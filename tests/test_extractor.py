from unittest.mock import MagicMock

import pytest

from cloudtrail_summarizer.errors import FetchError, ParseError
from cloudtrail_summarizer.extractor import HEADER, extract, get_string, parse_records, project

from .fakes import FakeS3, corrupt_deflate, log_file


def test_header_matches_output_format():
    assert ",".join(HEADER) == "EventTime,OperationUser,eventSource,eventName,awsRegion,sourceIPAddress,userAgent"


def test_project_full_event_in_fixed_order(full_event):
    assert project(full_event) == (
        "2020-03-01T00:00:00Z",
        "AIDAEXAMPLE",
        "s3.amazonaws.com",
        "GetObject",
        "us-east-1",
        "203.0.113.10",
        "aws-cli/2.0",
    )


def test_missing_principal_id_becomes_empty(full_event):
    del full_event["userIdentity"]["principalId"]

    row = project(full_event)

    assert row[1] == ""
    assert all(v for i, v in enumerate(row) if i != 1)


def test_missing_user_identity_becomes_empty(full_event):
    del full_event["userIdentity"]
    assert project(full_event)[1] == ""


@pytest.mark.parametrize(
    "record,path,expected",
    [
        ({"a": {"b": "x"}}, ("a", "b"), "x"),
        ({"a": "not-a-dict"}, ("a", "b"), ""),
        ({"a": {"b": 5}}, ("a", "b"), ""),
        ({"a": {"b": None}}, ("a", "b"), ""),
        ({}, ("a",), ""),
        (["not", "a", "dict"], ("a",), ""),
    ],
)
def test_get_string(record, path, expected):
    assert get_string(record, *path) == expected


def test_non_dict_record_projects_to_empty_row():
    assert project("garbage") == ("",) * 7


def test_parse_plain_and_gzipped(full_event):
    assert parse_records(log_file(full_event)) == [full_event]
    assert parse_records(log_file(full_event, compress=True)) == [full_event]


@pytest.mark.parametrize(
    "blob",
    [
        b"not json",
        b"[1, 2, 3]",
        b'{"NoRecords": []}',
        b'{"Records": {"not": "a list"}}',
        b"\x1f\x8bbroken gzip",
        b"\xff\xfe\x00",
        corrupt_deflate(),
    ],
)
def test_parse_errors(blob):
    with pytest.raises(ParseError):
        parse_records(blob, bucket="logs", key="k")


def test_empty_records_array_is_fine():
    assert parse_records(b'{"Records": []}') == []


def test_extract_rows_for_every_record(full_event):
    other = dict(full_event, eventName="PutObject")
    s3 = FakeS3({"k.json.gz": log_file(full_event, other, compress=True)})

    rows = extract(s3, "logs", "k.json.gz")

    assert [r[3] for r in rows] == ["GetObject", "PutObject"]


def test_extract_wraps_fetch_failure():
    s3 = FakeS3({})
    with pytest.raises(FetchError) as exc_info:
        extract(s3, "logs", "missing.json.gz")
    assert exc_info.value.key == "missing.json.gz"


def test_extract_wraps_broken_body_stream():
    body = MagicMock()
    body.read.side_effect = ConnectionResetError("connection reset by peer")
    s3 = MagicMock()
    s3.get_object.return_value = {"Body": body}

    with pytest.raises(FetchError):
        extract(s3, "logs", "k.json.gz")
