"""
Unit tests for the publish submitter, payload builder and product API client.

Run: pytest tests/unit/test_publish_service.py -v
"""

import asyncio

import pytest
import requests
from unittest.mock import MagicMock, patch

from exceptions import (
    ExternalServiceError,
    NotReadyError,
    ProductRejectedError,
    PublishFailedError,
    WizardValidationError,
)
from models.wizard import SeoData
from services.draft_store import DraftStore, MemoryStore
from services.publish_service import (
    GENERIC_PUBLISH_ERROR,
    ProductApiClient,
    PublishSubmitter,
    build_product_payload,
)

from tests.factories import FakeProductCreator, PhotoFactory, SessionFactory


def publish(submitter, session):
    return asyncio.run(submitter.publish(session))


class TestBuildProductPayload:
    """Tests for build_product_payload()"""

    def test_field_names(self):
        payload = build_product_payload(SessionFactory.complete())

        assert set(payload) == {
            "name", "description", "category", "price", "currency", "stockQuantity",
            "materials", "tags", "dimensions", "imageUrls", "seoTitle", "metaDescription",
        }
        assert set(payload["dimensions"]) == {"length", "width", "height", "weight"}

    def test_values_converted(self):
        session = SessionFactory.complete(
            price="499.50",
            quantity="3",
            materials="clay,  natural pigments, ",
            dimensions={"length": "30", "height": "12.5"},
            weight="1.2",
        )

        payload = build_product_payload(session)

        assert payload["price"] == 499.5
        assert payload["stockQuantity"] == 3
        assert payload["currency"] == "INR"
        assert payload["materials"] == ["clay", "natural pigments"]
        assert payload["tags"] == ["handmade", "pottery"]
        assert payload["dimensions"] == {"length": 30.0, "width": 0, "height": 12.5, "weight": 1.2}

    def test_fractional_quantity_truncated(self):
        session = SessionFactory.complete(quantity=2.5)

        assert build_product_payload(session)["stockQuantity"] == 2

    def test_keyword_list_used_as_tags(self):
        session = SessionFactory.complete()
        session.seo.keywords = ["clay", " ", "terracotta"]

        assert build_product_payload(session)["tags"] == ["clay", "terracotta"]

    def test_only_uploaded_photos_in_order(self):
        session = SessionFactory.complete(photos=[
            PhotoFactory.uploaded("b.jpg"),
            PhotoFactory.failed("x.jpg"),
            PhotoFactory.uploading("y.jpg"),
            PhotoFactory.uploaded("a.jpg"),
        ])

        payload = build_product_payload(session)

        assert payload["imageUrls"] == [
            "https://cdn.example.com/b.jpg",
            "https://cdn.example.com/a.jpg",
        ]

    def test_description_falls_back_to_short_description(self):
        session = SessionFactory.complete(short_description="Small clay pot")
        session.description = ""

        assert build_product_payload(session)["description"] == "Small clay pot"

    def test_seo_fields_omitted_without_title(self):
        session = SessionFactory.complete()
        session.seo = SeoData()

        payload = build_product_payload(session)

        assert "seoTitle" not in payload
        assert "metaDescription" not in payload


class TestPublishSubmitter:
    """Tests for PublishSubmitter.publish()"""

    def test_success_returns_id_and_clears_draft(self):
        creator = FakeProductCreator(product_id="prod-42")
        drafts = DraftStore(MemoryStore())
        session = SessionFactory.complete()
        session.errors = {"publish": "old failure"}
        drafts.save_draft(session)

        product_id = publish(PublishSubmitter(creator, draft_store=drafts), session)

        assert product_id == "prod-42"
        assert session.errors == {}
        assert drafts.has_draft() is False
        assert creator.payloads[0]["name"] == "Clay Pot"

    @pytest.mark.parametrize("uploaded_count", [0, 1, 5])
    def test_not_ready_while_any_upload_pending(self, uploaded_count):
        """One uploading photo blocks publish however many are uploaded."""
        creator = FakeProductCreator()
        photos = [PhotoFactory.uploaded(f"{i}.jpg") for i in range(uploaded_count)]
        photos.append(PhotoFactory.uploading("late.jpg"))
        session = SessionFactory.complete(photos=photos)

        with pytest.raises(NotReadyError) as exc_info:
            publish(PublishSubmitter(creator), session)

        assert exc_info.value.status_code == 409
        assert creator.payloads == []
        assert len(session.photos) == uploaded_count + 1

    def test_validation_errors_written_to_session(self):
        creator = FakeProductCreator()
        session = SessionFactory.complete()
        session.description = ""

        with pytest.raises(WizardValidationError) as exc_info:
            publish(PublishSubmitter(creator), session)

        assert exc_info.value.errors == {"description": "Product description is required"}
        assert session.errors == exc_info.value.errors
        assert creator.payloads == []

    def test_no_uploaded_photo(self):
        session = SessionFactory.complete(photos=[])

        with pytest.raises(WizardValidationError):
            publish(PublishSubmitter(FakeProductCreator()), session)

        assert "photos" in session.errors

    def test_server_field_errors_mapped(self):
        creator = FakeProductCreator.rejecting([
            {"field": "name", "message": "Name must be at least 3 characters"},
            {"field": "stockQuantity", "message": "Must be 0 or more"},
        ])
        session = SessionFactory.complete()
        drafts = DraftStore(MemoryStore())
        drafts.save_draft(session)

        with pytest.raises(PublishFailedError) as exc_info:
            publish(PublishSubmitter(creator, draft_store=drafts), session)

        assert exc_info.value.status_code == 422
        assert session.errors == {
            "name": "Name must be at least 3 characters",
            "quantity": "Must be 0 or more",
        }
        assert drafts.has_draft() is True
        assert session.basic_info.name == "Clay Pot"

    def test_rejection_without_fields_uses_message(self):
        creator = FakeProductCreator.rejecting([], message="Duplicate listing")
        session = SessionFactory.complete()

        with pytest.raises(PublishFailedError):
            publish(PublishSubmitter(creator), session)

        assert session.errors == {"publish": "Duplicate listing"}

    def test_unexpected_failure_generic_message(self):
        creator = FakeProductCreator(error=ExternalServiceError("product_api", "HTTP 500"))
        session = SessionFactory.complete()

        with pytest.raises(PublishFailedError) as exc_info:
            publish(PublishSubmitter(creator), session)

        assert exc_info.value.status_code == 502
        assert session.errors == {"publish": GENERIC_PUBLISH_ERROR}
        assert len(session.uploaded_photos()) == 1

    def test_retry_after_failure_succeeds(self):
        creator = FakeProductCreator(error=RuntimeError("boom"))
        session = SessionFactory.complete()
        submitter = PublishSubmitter(creator)

        with pytest.raises(PublishFailedError):
            publish(submitter, session)
        creator.error = None

        assert publish(submitter, session) == "prod-123"
        assert session.errors == {}


class TestProductApiClient:
    """Tests for ProductApiClient.create_product()"""

    def _response(self, status_code, body):
        response = MagicMock()
        response.status_code = status_code
        response.ok = status_code < 400
        response.json.return_value = body
        return response

    def test_returns_product_id(self):
        client = ProductApiClient(url="http://api.test/products/create")
        body = {"success": True, "data": {"productId": "p-1"}}

        with patch("services.publish_service.requests.post", return_value=self._response(201, body)) as post:
            assert client.create_product({"name": "Clay Pot"}) == "p-1"

        assert post.call_args.kwargs["json"] == {"name": "Clay Pot"}

    def test_nested_product_id(self):
        client = ProductApiClient(url="http://api.test/products/create")
        body = {"data": {"product": {"id": "p-2"}}}

        with patch("services.publish_service.requests.post", return_value=self._response(201, body)):
            assert client.create_product({}) == "p-2"

    def test_validation_details_become_field_errors(self):
        client = ProductApiClient(url="http://api.test/products/create")
        body = {
            "error": "Validation Error",
            "message": "Invalid request data",
            "details": [{"field": "price", "message": "Must be positive"}, {"bogus": True}],
        }

        with patch("services.publish_service.requests.post", return_value=self._response(400, body)):
            with pytest.raises(ProductRejectedError) as exc_info:
                client.create_product({})

        assert exc_info.value.message == "Invalid request data"
        assert exc_info.value.field_errors == [{"field": "price", "message": "Must be positive"}]

    def test_server_error(self):
        client = ProductApiClient(url="http://api.test/products/create")

        with patch("services.publish_service.requests.post", return_value=self._response(500, {})):
            with pytest.raises(ExternalServiceError):
                client.create_product({})

    def test_transport_error(self):
        client = ProductApiClient(url="http://api.test/products/create")

        with patch("services.publish_service.requests.post", side_effect=requests.Timeout("slow")):
            with pytest.raises(ExternalServiceError):
                client.create_product({})

    def test_missing_id(self):
        client = ProductApiClient(url="http://api.test/products/create")

        with patch("services.publish_service.requests.post", return_value=self._response(200, {"data": {}})):
            with pytest.raises(ExternalServiceError):
                client.create_product({})
