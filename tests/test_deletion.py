"""Tests for deletion.py module.

Tests key resolution, the existence precheck and delete outcomes.
"""

import json
from unittest.mock import Mock

import httpx
import pytest

from conftest import json_response, text_response
from shdw_drive.deletion import (
    DELETE_PATH,
    NOT_FOUND_MESSAGE,
    DeletionService,
    resolve_object_key,
)
from shdw_drive.errors import DeleteFailed, NoSigner
from shdw_drive.listing import LIST_PATH
from shdw_drive.messages import delete_message
from shdw_drive.signer import WalletSigner


@pytest.fixture
def service(http_client, config, signer) -> DeletionService:
    return DeletionService(http_client, config, signer)


def listing(*keys: str):
    return json_response(200, {"objects": [{"key": k, "size": 1} for k in keys]})


class TestResolveObjectKey:
    """Tests for resolve_object_key."""

    def test_url_after_bucket_segment(self):
        """Everything after the bucket segment is the key."""
        url = "https://cdn.test/B/folder/file.jpg"
        assert resolve_object_key("B", url) == "folder/file.jpg"

    def test_plain_path_is_verbatim(self):
        """Non-URL input is used as is."""
        assert resolve_object_key("B", "B/folder/file.jpg") == "B/folder/file.jpg"

    def test_url_without_bucket_is_verbatim(self):
        """A URL lacking the bucket segment is used as is."""
        url = "https://cdn.test/other/file.jpg"
        assert resolve_object_key("B", url) == url

    def test_url_ending_in_bucket_is_verbatim(self):
        """A URL with nothing after the bucket is used as is."""
        url = "https://cdn.test/B"
        assert resolve_object_key("B", url) == url

    def test_first_bucket_segment_wins(self):
        """Later segments equal to the bucket stay in the key."""
        url = "https://cdn.test/B/B/file.jpg"
        assert resolve_object_key("B", url) == "B/file.jpg"


class TestExistenceCheck:
    """Tests for the listing precheck."""

    def test_listing_scoped_to_owner(self, drive, service, signer):
        """Listing is queried for this bucket and signer."""
        drive.route(LIST_PATH, listing())

        service.exists("B", "file.jpg")

        assert json.loads(drive.requests[0].content) == {
            "bucket": "B",
            "owner": signer.identity(),
        }

    def test_found(self, drive, service):
        drive.route(LIST_PATH, listing("a.txt", "file.jpg"))
        assert service.exists("B", "file.jpg") is True

    def test_listing_error_counts_as_missing(self, drive, service):
        """A failed listing is treated as a missing object."""
        drive.route(LIST_PATH, json_response(500, {"error": "down"}))
        assert service.exists("B", "file.jpg") is False

    def test_unparsable_listing_counts_as_missing(self, drive, service):
        drive.route(LIST_PATH, text_response(200, "<html>"))
        assert service.exists("B", "file.jpg") is False

    def test_malformed_entry_does_not_hide_listed_key(self, drive, service):
        """Only keys are compared, so a bad size on another entry is ignored."""
        drive.route(
            LIST_PATH,
            json_response(200, {
                "objects": [
                    {"key": "a.txt", "size": 1},
                    {"key": "other.bin", "size": "n/a"},
                    "junk",
                ]
            }),
        )
        assert service.exists("B", "a.txt") is True

    def test_missing_identity_propagates(self, drive, http_client, config):
        """A signer without a public key raises instead of failing open."""
        drive.route(LIST_PATH, listing("a.txt"))
        service = DeletionService(http_client, config, WalletSigner(Mock(public_key="")))

        with pytest.raises(NoSigner):
            service.delete("B", "a.txt")

        assert drive.requests == []

    def test_network_error_counts_as_missing(self, config, signer):
        """Transport errors are swallowed by the precheck."""
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(refuse))
        assert DeletionService(client, config, signer).exists("B", "k") is False


class TestDelete:
    """Tests for DeletionService.delete."""

    def test_missing_file_skips_delete_endpoint(self, drive, service):
        """A missing key returns a negative result without deleting."""
        drive.route(LIST_PATH, listing("other.jpg"))

        result = service.delete("B", "B/folder/file.jpg")

        assert result.success is False
        assert result.message == "File does not exist or has already been deleted"
        assert drive.paths == [LIST_PATH]

    def test_repeated_delete_never_raises(self, drive, service):
        """Deleting the same key twice is safe."""
        drive.route(
            LIST_PATH,
            listing("file.jpg"),
            listing(),
        )
        drive.route(DELETE_PATH, json_response(200, {"message": "deleted"}))

        first = service.delete("B", "file.jpg")
        second = service.delete("B", "file.jpg")

        assert first.success is True
        assert second.success is False
        assert second.message == NOT_FOUND_MESSAGE
        assert drive.paths.count(DELETE_PATH) == 1

    def test_successful_delete(self, drive, service, signer):
        """A found key is deleted with a signed request."""
        drive.route(LIST_PATH, listing("folder/file.jpg"))
        drive.route(DELETE_PATH, json_response(200, {"message": "File deleted"}))

        result = service.delete("B", "https://cdn.test/B/folder/file.jpg")

        assert result.success is True
        assert result.message == "File deleted"
        body = json.loads(drive.requests_to(DELETE_PATH)[0].content)
        assert body == {
            "bucket": "B",
            "filename": "folder/file.jpg",
            "message": signer.sign(delete_message("B", "folder/file.jpg")),
            "signer": signer.identity(),
        }

    def test_listed_key_deleted_despite_malformed_sibling(self, drive, service):
        """An unrelated entry with a bad size does not skip the delete."""
        drive.route(
            LIST_PATH,
            json_response(200, {
                "objects": [
                    {"key": "a.txt", "size": 1},
                    {"key": "other.bin", "size": "n/a"},
                ]
            }),
        )
        drive.route(DELETE_PATH, json_response(200, {}))

        result = service.delete("B", "a.txt")

        assert result.success is True
        assert drive.paths == [LIST_PATH, DELETE_PATH]

    def test_default_success_message(self, drive, service):
        drive.route(LIST_PATH, listing("f"))
        drive.route(DELETE_PATH, json_response(200, {}))
        assert service.delete("B", "f").message == "File deleted successfully"

    def test_server_declined(self, drive, service):
        """A parsed response with success false is a negative result."""
        drive.route(LIST_PATH, listing("f"))
        drive.route(DELETE_PATH, json_response(200, {"success": False, "message": "locked"}))

        result = service.delete("B", "f")

        assert result.success is False
        assert result.message == "locked"

    def test_error_status_raises(self, drive, service):
        """A non-2xx status raises DeleteFailed with the server error."""
        drive.route(LIST_PATH, listing("f"))
        drive.route(DELETE_PATH, json_response(403, {"error": "Invalid signature"}))

        with pytest.raises(DeleteFailed, match="Invalid signature") as exc_info:
            service.delete("B", "f")

        assert exc_info.value.status_code == 403

    def test_error_status_default_message(self, drive, service):
        drive.route(LIST_PATH, listing("f"))
        drive.route(DELETE_PATH, json_response(500, {}))

        with pytest.raises(DeleteFailed, match="Delete failed"):
            service.delete("B", "f")

    def test_unparsable_response_raises(self, drive, service):
        """A body that is not JSON raises DeleteFailed."""
        drive.route(LIST_PATH, listing("f"))
        drive.route(DELETE_PATH, text_response(200, "ok"))

        with pytest.raises(DeleteFailed, match="Failed to parse server response"):
            service.delete("B", "f")
