from __future__ import annotations

import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from xlsx_user_loader.errors import ObjectFetchError
from xlsx_user_loader.storage.s3_source import LocalFileSource, S3ObjectSource


def test_fetch_reads_whole_body():
    client = MagicMock()
    client.get_object.return_value = {"Body": io.BytesIO(b"xlsx-bytes")}
    assert S3ObjectSource(client).fetch("uploads", "dir/users.xlsx") == b"xlsx-bytes"
    client.get_object.assert_called_once_with(Bucket="uploads", Key="dir/users.xlsx")


def test_fetch_client_error_wrapped():
    client = MagicMock()
    client.get_object.side_effect = ClientError(
        {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
    )
    with pytest.raises(ObjectFetchError, match="s3://uploads/users.xlsx"):
        S3ObjectSource(client).fetch("uploads", "users.xlsx")


def test_fetch_network_error_wrapped():
    client = MagicMock()
    client.get_object.side_effect = EndpointConnectionError(endpoint_url="https://s3")
    with pytest.raises(ObjectFetchError):
        S3ObjectSource(client).fetch("uploads", "users.xlsx")


def test_local_file_source(tmp_path: Path):
    p = tmp_path / "u.xlsx"
    p.write_bytes(b"abc")
    assert LocalFileSource().fetch("ignored", str(p)) == b"abc"
    with pytest.raises(ObjectFetchError):
        LocalFileSource().fetch("ignored", str(tmp_path / "missing.xlsx"))
