"""Tests for file-delivery sinks."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from finance_backup.services import sinks as sinks_module
from finance_backup.services.sinks import (
    LocalDirectorySink,
    ObjectStoreSink,
    SinkError,
    build_sink,
)


@pytest.fixture
def mock_boto_client():
    """Mock boto3 client."""
    with patch("boto3.client") as mock:
        yield mock


class TestLocalDirectorySink:
    def test_writes_file(self, tmp_path):
        """Artifacts land in the directory under their own name."""
        sink = LocalDirectorySink(tmp_path / "out")

        location = sink.deliver(b"{}", "backup.json", "application/json")

        assert (tmp_path / "out" / "backup.json").read_bytes() == b"{}"
        assert location == str(tmp_path / "out" / "backup.json")

    def test_leaves_no_temporary_files(self, tmp_path):
        sink = LocalDirectorySink(tmp_path)

        sink.deliver(b"one", "a.csv", "text/csv")
        sink.deliver(b"two", "a.csv", "text/csv")

        assert [path.name for path in tmp_path.iterdir()] == ["a.csv"]
        assert (tmp_path / "a.csv").read_bytes() == b"two"

    @pytest.mark.parametrize("filename", ["../escape.json", "nested/a.json", "", ".."])
    def test_rejects_unsafe_filenames(self, tmp_path, filename):
        """Filenames may not leave the export directory."""
        sink = LocalDirectorySink(tmp_path)

        with pytest.raises(SinkError, match="unsafe filename"):
            sink.deliver(b"x", filename, "text/plain")

    def test_os_error_becomes_sink_error(self, tmp_path):
        """A path occupied by a regular file cannot be used as a directory."""
        blocker = tmp_path / "blocked"
        blocker.write_text("file")

        with pytest.raises(SinkError, match="Failed to write"):
            LocalDirectorySink(blocker).deliver(b"x", "a.json", "application/json")


class TestObjectStoreSink:
    def test_upload_success(self, mock_boto_client):
        """Artifacts are uploaded under the prefix with their MIME type."""
        mock_s3 = MagicMock()
        mock_s3.head_bucket.return_value = None
        mock_boto_client.return_value = mock_s3

        sink = ObjectStoreSink(bucket="test-bucket", prefix="exports")
        ObjectStoreSink._checked_buckets.clear()
        location = sink.deliver(b"content", "x.json", "application/json")

        mock_s3.put_object.assert_called_once_with(
            Bucket="test-bucket", Key="exports/x.json", Body=b"content", ContentType="application/json"
        )
        assert location == "s3://test-bucket/exports/x.json"

    def test_empty_prefix(self, mock_boto_client):
        mock_boto_client.return_value = MagicMock()

        sink = ObjectStoreSink(bucket="test-bucket", prefix="")

        assert sink.object_key("x.json") == "x.json"

    def test_upload_error(self, mock_boto_client):
        """Upload failure."""
        mock_s3 = MagicMock()
        mock_s3.head_bucket.return_value = None
        mock_s3.put_object.side_effect = ClientError(
            {"Error": {"Code": "500", "Message": "Error"}}, "put_object"
        )
        mock_boto_client.return_value = mock_s3

        sink = ObjectStoreSink(bucket="test-bucket", prefix="exports")
        ObjectStoreSink._checked_buckets.clear()

        with pytest.raises(SinkError, match="Failed to upload"):
            sink.deliver(b"content", "x.json", "application/json")

    def test_creates_missing_bucket(self, mock_boto_client, monkeypatch):
        """Missing bucket should be created before upload."""
        mock_s3 = MagicMock()
        mock_s3.head_bucket.side_effect = ClientError(
            {"Error": {"Code": "404", "Message": "Not Found"}}, "head_bucket"
        )
        mock_boto_client.return_value = mock_s3
        ObjectStoreSink._checked_buckets.clear()
        monkeypatch.setattr(sinks_module.settings, "s3_region", "us-east-1")

        sink = ObjectStoreSink(bucket="test-bucket")
        sink.deliver(b"content", "x.json", "application/json")

        mock_s3.create_bucket.assert_called_once_with(Bucket="test-bucket")
        mock_s3.put_object.assert_called_once()

    def test_creates_bucket_with_region(self, mock_boto_client, monkeypatch):
        """Missing bucket should include region configuration when needed."""
        mock_s3 = MagicMock()
        mock_s3.head_bucket.side_effect = ClientError(
            {"Error": {"Code": "404", "Message": "Not Found"}}, "head_bucket"
        )
        mock_boto_client.return_value = mock_s3
        ObjectStoreSink._checked_buckets.clear()
        monkeypatch.setattr(sinks_module.settings, "s3_region", "ap-south-1")

        sink = ObjectStoreSink(bucket="test-bucket")
        sink.deliver(b"content", "x.json", "application/json")

        mock_s3.create_bucket.assert_called_once_with(
            Bucket="test-bucket",
            CreateBucketConfiguration={"LocationConstraint": "ap-south-1"},
        )

    def test_bucket_access_denied(self, mock_boto_client):
        """Errors other than a missing bucket are not retried as a create."""
        mock_s3 = MagicMock()
        mock_s3.head_bucket.side_effect = ClientError(
            {"Error": {"Code": "403", "Message": "Forbidden"}}, "head_bucket"
        )
        mock_boto_client.return_value = mock_s3
        ObjectStoreSink._checked_buckets.clear()

        sink = ObjectStoreSink(bucket="test-bucket")

        with pytest.raises(SinkError, match="Failed to access bucket"):
            sink.deliver(b"content", "x.json", "application/json")
        mock_s3.create_bucket.assert_not_called()
        mock_s3.put_object.assert_not_called()

    def test_bucket_checked_once(self, mock_boto_client):
        mock_s3 = MagicMock()
        mock_s3.head_bucket.return_value = None
        mock_boto_client.return_value = mock_s3
        ObjectStoreSink._checked_buckets.clear()

        sink = ObjectStoreSink(bucket="test-bucket")
        sink.deliver(b"a", "a.json", "application/json")
        sink.deliver(b"b", "b.json", "application/json")

        mock_s3.head_bucket.assert_called_once_with(Bucket="test-bucket")
        assert mock_s3.put_object.call_count == 2


class TestBuildSink:
    def test_local(self, tmp_path):
        sink = build_sink("local", directory=tmp_path)

        assert isinstance(sink, LocalDirectorySink)
        assert sink.directory == tmp_path

    def test_s3(self, mock_boto_client):
        assert isinstance(build_sink("S3"), ObjectStoreSink)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unsupported export sink"):
            build_sink("ftp")
