"""Tests for payload schemas and the field-error shaping."""

from datetime import datetime

import pytest

from mediatrack.errors import ValidationFailed
from mediatrack.schemas.library_schemas import LibraryEntryPatch
from mediatrack.schemas.media_schemas import MediaCreate, MediaUpdate
from mediatrack.schemas.user_schemas import UserRegister
from mediatrack.validation import field_errors, validate_payload

VALID_MEDIA = {
    "title": "Arrival",
    "type": "MOVIE",
    "category": ["Sci-Fi", "Drama"],
    "releaseYear": 2016,
}


def _errors(model, raw) -> dict:
    with pytest.raises(ValidationFailed) as exc_info:
        validate_payload(model, raw)
    return exc_info.value.errors


class TestMediaCreate:
    def test_valid_payload(self):
        media = validate_payload(MediaCreate, {**VALID_MEDIA, "rating": 8.5, "image": "https://img.example.com/a.jpg"})
        assert media.release_year == 2016
        assert media.category == ["Sci-Fi", "Drama"]

    def test_reports_every_missing_field_at_once(self):
        errors = _errors(MediaCreate, {})
        assert {"title", "type", "category", "releaseYear"} <= set(errors)

    def test_rating_bounds(self):
        assert "rating" in _errors(MediaCreate, {**VALID_MEDIA, "rating": 10.5})
        assert "rating" in _errors(MediaCreate, {**VALID_MEDIA, "rating": -1})
        assert validate_payload(MediaCreate, {**VALID_MEDIA, "rating": 0}).rating == 0
        assert validate_payload(MediaCreate, {**VALID_MEDIA, "rating": 10}).rating == 10

    def test_year_bounds(self):
        next_year = datetime.now().year + 1
        assert "releaseYear" in _errors(MediaCreate, {**VALID_MEDIA, "releaseYear": 1899})
        assert "releaseYear" in _errors(MediaCreate, {**VALID_MEDIA, "releaseYear": next_year})

    def test_end_year_before_release_year(self):
        errors = _errors(MediaCreate, {**VALID_MEDIA, "type": "SERIES", "endYear": 2010})
        assert errors["endYear"] == ["End year cannot be before release year"]

    def test_end_year_equal_to_release_year_is_fine(self):
        media = validate_payload(MediaCreate, {**VALID_MEDIA, "type": "SERIES", "endYear": 2016})
        assert media.end_year == 2016

    def test_invalid_image_url(self):
        assert _errors(MediaCreate, {**VALID_MEDIA, "image": "not a url"})["image"] == ["Invalid URL"]

    def test_unknown_type(self):
        assert "type" in _errors(MediaCreate, {**VALID_MEDIA, "type": "DOCUMENTARY"})

    def test_empty_category(self):
        assert "category" in _errors(MediaCreate, {**VALID_MEDIA, "category": []})
        assert "category" in _errors(MediaCreate, {**VALID_MEDIA, "category": ["  "]})

    def test_blank_title(self):
        assert _errors(MediaCreate, {**VALID_MEDIA, "title": "   "})["title"] == ["Must not be empty"]


class TestMediaUpdate:
    def test_everything_optional(self):
        patch = validate_payload(MediaUpdate, {})
        assert patch.model_dump(exclude_unset=True) == {}

    def test_only_sent_fields_are_set(self):
        patch = validate_payload(MediaUpdate, {"rating": 7})
        assert patch.model_dump(exclude_unset=True) == {"rating": 7}


class TestUserRegister:
    def test_nickname_cannot_contain_spaces(self):
        errors = _errors(
            UserRegister,
            {"email": "a@example.com", "firstName": "Ana", "lastName": "Silva", "nickName": "ana s", "password": "secret1"},
        )
        assert errors == {"nickName": ["Nickname cannot contain spaces"]}

    def test_collects_all_fields(self):
        errors = _errors(
            UserRegister,
            {"email": "nope", "firstName": "A", "lastName": "B", "nickName": "x", "password": "123"},
        )
        assert set(errors) == {"email", "firstName", "lastName", "nickName", "password"}


class TestLibraryEntryPatch:
    def test_flags_cannot_be_null(self):
        assert "favorite" in _errors(LibraryEntryPatch, {"favorite": None})

    def test_rating_can_be_cleared(self):
        patch = validate_payload(LibraryEntryPatch, {"rating": None})
        assert patch.model_dump(exclude_unset=True) == {"rating": None}


class TestFieldErrors:
    def test_strips_location_prefix_and_value_error_prefix(self):
        raw = [
            {"loc": ("body", "title"), "msg": "Value error, Must not be empty"},
            {"loc": ("query", "page"), "msg": "Input should be greater than or equal to 1"},
            {"loc": ("body",), "msg": "Field required"},
        ]
        assert field_errors(raw) == {
            "title": ["Must not be empty"],
            "page": ["Input should be greater than or equal to 1"],
            "body": ["Field required"],
        }

    def test_groups_messages_per_field(self):
        raw = [
            {"loc": ("body", "category", 0), "msg": "Input should be a valid string"},
            {"loc": ("body", "category", 1), "msg": "Input should be a valid string"},
            {"loc": ("body", "category"), "msg": "Too short"},
        ]
        assert field_errors(raw) == {"category": ["Input should be a valid string", "Too short"]}
