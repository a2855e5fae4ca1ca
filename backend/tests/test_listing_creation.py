"""
Unit tests for the listing creation flow.
Tests draft validation, image upload ordering, and the insert payload.
"""

import pytest
from decimal import Decimal
from unittest.mock import Mock, patch

from marketplace.errors import DraftValidationError, GatewayError, ImageUploadError
from marketplace.models.listing import ListingDraft
from marketplace.services.listing_creation import (
    ImageFile,
    build_listing_row,
    create_listing,
    parse_price,
    validate_listing_draft,
)

PUBLIC_URL = "https://test.supabase.co/storage/v1/object/public/images/listings/1767225600000-abc.png"


def _valid_draft(**overrides) -> ListingDraft:
    fields = {
        "title": "Vintage Camera",
        "description": "35mm film camera, fully working",
        "price": "120.50",
        "category": "electronics",
        "condition": "like-new",
        "location": "Austin, TX",
        "seller_email": "seller@example.com",
    }
    fields.update(overrides)
    return ListingDraft(**fields)


def _image() -> ImageFile:
    return ImageFile(content=b"\x89PNG fake", filename="camera.png", content_type="image/png")


def _mock_insert(mock_client, listing_id="new-1", created_at="2026-10-19T12:00:00+00:00"):
    mock_client.table.return_value.insert.return_value.execute.return_value = Mock(
        data=[{"id": listing_id, "created_at": created_at}]
    )


class TestParsePrice:
    def test_decimal_string(self):
        assert parse_price("120.50") == Decimal("120.50")

    def test_zero_is_allowed(self):
        assert parse_price("0") == Decimal("0")

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_price(" 15 ") == Decimal("15")

    @pytest.mark.parametrize("raw", ["", "abc", "-1", "NaN", "Infinity", "1,000"])
    def test_invalid_prices(self, raw):
        assert parse_price(raw) is None


class TestValidateListingDraft:
    """Test client-side validation of a draft listing."""

    def test_valid_draft_has_no_problems(self):
        assert validate_listing_draft(_valid_draft(), _image()) == []

    def test_condition_is_optional(self):
        assert validate_listing_draft(_valid_draft(condition=""), _image()) == []

    def test_blank_required_fields_are_reported(self):
        """Whitespace-only text counts as missing."""
        draft = _valid_draft(title="  ", location="", seller_email="\n")
        problems = validate_listing_draft(draft, _image())

        assert "title is required" in problems
        assert "location is required" in problems
        assert "seller_email is required" in problems

    def test_missing_category_is_reported(self):
        problems = validate_listing_draft(_valid_draft(category=""), _image())
        assert "category is required" in problems

    def test_unknown_category_and_condition_are_reported(self):
        problems = validate_listing_draft(_valid_draft(category="boats", condition="mint"), _image())
        assert any("boats" in p for p in problems)
        assert any("mint" in p for p in problems)

    def test_negative_price_is_reported(self):
        problems = validate_listing_draft(_valid_draft(price="-5"), _image())
        assert "price must be a non-negative number" in problems

    def test_image_is_required(self):
        problems = validate_listing_draft(_valid_draft(), None)
        assert "an image is required" in problems

    def test_empty_image_counts_as_missing(self):
        problems = validate_listing_draft(_valid_draft(), ImageFile(content=b""))
        assert "an image is required" in problems

    def test_length_limits(self):
        draft = _valid_draft(title="x" * 81, description="y" * 1001)
        problems = validate_listing_draft(draft, _image())

        assert "title must be at most 80 characters" in problems
        assert "description must be at most 1000 characters" in problems


class TestBuildListingRow:
    def test_trims_fields_and_stores_price_as_decimal_string(self):
        row = build_listing_row(_valid_draft(title="  Camera  ", price=" 10 "), PUBLIC_URL)

        assert row["title"] == "Camera"
        assert row["price"] == "10"
        assert row["image_url"] == PUBLIC_URL

    def test_blank_condition_is_stored_as_null(self):
        row = build_listing_row(_valid_draft(condition=""), None)
        assert row["condition"] is None
        assert row["image_url"] is None


class TestCreateListing:
    """Test the upload-then-insert flow."""

    def test_success_uses_resolved_public_url(self, mock_client):
        """The created listing's image_url is the public URL of the uploaded object."""
        _mock_insert(mock_client)

        with patch('marketplace.services.listing_creation.upload_listing_image') as mock_upload:
            with patch('marketplace.services.listing_creation.get_public_url') as mock_public_url:
                mock_upload.return_value = "listings/1767225600000-abc.png"
                mock_public_url.return_value = PUBLIC_URL

                listing = create_listing(mock_client, _valid_draft(), _image(), "images")

                mock_upload.assert_called_once_with(
                    mock_client, "images", b"\x89PNG fake", "camera.png", "image/png"
                )
                mock_public_url.assert_called_once_with(
                    mock_client, "images", "listings/1767225600000-abc.png"
                )

        assert listing.image_url == PUBLIC_URL
        assert listing.id == "new-1"
        assert listing.price == Decimal("120.50")
        assert listing.condition == "like-new"

        inserted = mock_client.table.return_value.insert.call_args[0][0]
        assert inserted["image_url"] == PUBLIC_URL
        mock_client.table.assert_called_with("listings")

    def test_upload_failure_never_inserts(self, mock_client):
        """If the image upload fails, no listing row is created."""
        with patch('marketplace.services.listing_creation.upload_listing_image') as mock_upload:
            mock_upload.side_effect = ImageUploadError("bucket not found")

            with pytest.raises(ImageUploadError):
                create_listing(mock_client, _valid_draft(), _image(), "images")

        mock_client.table.return_value.insert.assert_not_called()

    def test_unresolved_public_url_never_inserts(self, mock_client):
        with patch('marketplace.services.listing_creation.upload_listing_image') as mock_upload:
            with patch('marketplace.services.listing_creation.get_public_url') as mock_public_url:
                mock_upload.return_value = "listings/1.png"
                mock_public_url.side_effect = ImageUploadError("Could not get public URL after upload")

                with pytest.raises(ImageUploadError):
                    create_listing(mock_client, _valid_draft(), _image(), "images")

        mock_client.table.return_value.insert.assert_not_called()

    def test_invalid_draft_makes_no_network_calls(self, mock_client):
        with patch('marketplace.services.listing_creation.upload_listing_image') as mock_upload:
            with pytest.raises(DraftValidationError) as exc_info:
                create_listing(mock_client, _valid_draft(title=""), _image(), "images")

            mock_upload.assert_not_called()

        assert "title is required" in exc_info.value.problems
        mock_client.table.assert_not_called()

    def test_insert_failure_raises_gateway_error(self, mock_client):
        mock_client.table.return_value.insert.return_value.execute.side_effect = Exception("constraint violated")

        with patch('marketplace.services.listing_creation.upload_listing_image', return_value="listings/1.png"):
            with patch('marketplace.services.listing_creation.get_public_url', return_value=PUBLIC_URL):
                with pytest.raises(GatewayError) as exc_info:
                    create_listing(mock_client, _valid_draft(), _image(), "images")

        assert "constraint violated" in str(exc_info.value)

    def test_empty_insert_result_raises_gateway_error(self, mock_client):
        mock_client.table.return_value.insert.return_value.execute.return_value = Mock(data=[])

        with patch('marketplace.services.listing_creation.upload_listing_image', return_value="listings/1.png"):
            with patch('marketplace.services.listing_creation.get_public_url', return_value=PUBLIC_URL):
                with pytest.raises(GatewayError):
                    create_listing(mock_client, _valid_draft(), _image(), "images")

    def test_unreadable_insert_result_raises_gateway_error(self, mock_client):
        """A committed row that fails to parse is reported as a gateway error, not a crash."""
        mock_client.table.return_value.insert.return_value.execute.return_value = Mock(
            data=[{"id": "new-1", "created_at": "not a timestamp"}]
        )

        with patch('marketplace.services.listing_creation.upload_listing_image', return_value="listings/1.png"):
            with patch('marketplace.services.listing_creation.get_public_url', return_value=PUBLIC_URL):
                with pytest.raises(GatewayError) as exc_info:
                    create_listing(mock_client, _valid_draft(), _image(), "images")

        assert "malformed" in str(exc_info.value)
