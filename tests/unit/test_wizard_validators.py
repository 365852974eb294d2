"""
Unit tests for the per-step wizard validators.

Run: pytest tests/unit/test_wizard_validators.py -v
"""

import pytest

from models.wizard import SeoData, WizardSession
from services.wizard_validators import (
    MSG_UPLOADS_FAILED,
    MSG_UPLOADS_PENDING,
    parse_number,
    validate_basic_info,
    validate_description,
    validate_seo,
    validate_step,
    validate_through,
)

from tests.factories import PhotoFactory, SessionFactory


class TestParseNumber:
    """Tests for parse_number()"""

    @pytest.mark.parametrize("value,expected", [
        ("500", 500.0),
        (" 12.5 ", 12.5),
        (3, 3.0),
        (0.5, 0.5),
    ])
    def test_parses_numbers(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "12abc", True, "nan", "inf", "-Infinity", float("nan"), float("inf")])
    def test_non_numbers_return_none(self, value):
        assert parse_number(value) is None


class TestValidateBasicInfo:
    """Tests for validate_basic_info()"""

    def test_empty_session_reports_every_field(self):
        """A fresh session fails on all required fields."""
        errors = validate_basic_info(WizardSession())

        assert set(errors) == {"name", "category", "price", "quantity", "photos"}
        assert errors["name"] == "Product name is required"
        assert errors["category"] == "Category is required"
        assert errors["price"] == "Valid price is required"
        assert errors["quantity"] == "Quantity is required"
        assert errors["photos"] == "At least one photo is required"

    def test_complete_info_passes(self):
        assert validate_basic_info(SessionFactory.complete()) == {}

    def test_whitespace_name_is_blank(self):
        session = SessionFactory.complete()
        session.basic_info.name = "   "

        assert "name" in validate_basic_info(session)

    @pytest.mark.parametrize("price", ["0", "-5", "abc", ""])
    def test_invalid_price(self, price):
        session = SessionFactory.complete(price=price)

        assert validate_basic_info(session)["price"] == "Valid price is required"

    @pytest.mark.parametrize("quantity", ["0", "-1", "many"])
    def test_invalid_quantity(self, quantity):
        session = SessionFactory.complete(quantity=quantity)

        assert "quantity" in validate_basic_info(session)

    @pytest.mark.parametrize("value", ["nan", "inf", float("nan")])
    def test_non_finite_price_and_quantity_rejected(self, value):
        """NaN and infinity never pass as a price or a quantity."""
        errors = validate_basic_info(SessionFactory.complete(price=value, quantity=value))

        assert errors["price"] == "Valid price is required"
        assert errors["quantity"] == "Quantity is required"

    def test_unknown_category_rejected(self):
        session = SessionFactory.complete(category="spaceships")

        assert validate_basic_info(session)["category"] == "Select a valid craft category"

    def test_uploading_photo_blocks_step(self):
        """A photo still in flight blocks advancing, even with an uploaded one."""
        session = SessionFactory.complete(photos=[
            PhotoFactory.uploaded("a.jpg"),
            PhotoFactory.uploading("b.jpg"),
        ])

        assert validate_basic_info(session)["photos"] == MSG_UPLOADS_PENDING

    def test_failed_photo_blocks_step(self):
        session = SessionFactory.complete(photos=[
            PhotoFactory.uploaded("a.jpg"),
            PhotoFactory.failed("b.jpg"),
        ])

        assert validate_basic_info(session)["photos"] == MSG_UPLOADS_FAILED

    def test_failed_reported_before_pending(self):
        session = SessionFactory.complete(photos=[
            PhotoFactory.uploading("a.jpg"),
            PhotoFactory.failed("b.jpg"),
        ])

        assert validate_basic_info(session)["photos"] == MSG_UPLOADS_FAILED

    def test_optional_fields_not_required(self):
        """SKU, dimensions, weight and materials may be left empty."""
        session = SessionFactory.complete(materials=None)

        assert validate_basic_info(session) == {}


class TestValidateDescriptionAndSeo:
    """Tests for validate_description() and validate_seo()"""

    def test_blank_description(self):
        session = SessionFactory.complete()
        session.description = "  "

        assert validate_description(session) == {"description": "Product description is required"}

    def test_description_present(self):
        assert validate_description(SessionFactory.complete()) == {}

    def test_missing_seo_fields(self):
        session = SessionFactory.complete()
        session.seo = SeoData()

        errors = validate_seo(session)

        assert errors == {
            "seoTitle": "SEO title is required",
            "metaDescription": "Meta description is required",
        }

    def test_slug_and_keywords_optional(self):
        session = SessionFactory.complete()
        session.seo = SeoData(title="Clay Pot", meta_description="A pot")

        assert validate_seo(session) == {}


class TestValidateStep:
    """Tests for validate_step() and validate_through()"""

    def test_preview_revalidates_earlier_steps(self):
        """Step 4 reports the errors of steps 1-3 together."""
        session = SessionFactory.complete()
        session.basic_info.name = ""
        session.description = ""
        session.seo = SeoData()

        errors = validate_step(session, 4)

        assert set(errors) == {"name", "description", "seoTitle", "metaDescription"}

    def test_preview_passes_for_complete_session(self):
        assert validate_step(SessionFactory.complete(), 4) == {}

    def test_step_only_checks_its_own_fields(self):
        """Step 2 does not care about missing SEO data."""
        session = SessionFactory.complete()
        session.seo = SeoData()

        assert validate_step(session, 2) == {}

    @pytest.mark.parametrize("step", [0, 5, -1])
    def test_unknown_step_raises(self, step):
        with pytest.raises(ValueError):
            validate_step(WizardSession(), step)

    def test_validate_through_merges_steps(self):
        session = SessionFactory.complete()
        session.description = ""

        assert validate_through(session, 1) == {}
        assert validate_through(session, 2) == {"description": "Product description is required"}

    def test_validators_do_not_mutate_session(self):
        session = WizardSession()

        validate_step(session, 4)

        assert session.errors == {}
        assert session == WizardSession()
