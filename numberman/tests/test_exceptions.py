"""Tests for errors, the unit of work and settings."""

import pytest
from django.db import DatabaseError, IntegrityError

from numberman.conf import NumbermanSettings, numberman_settings
from numberman.exceptions import (
    BaseError,
    CapacityError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    NumbermanError,
    StoreError,
    ValidationError,
)
from numberman.models import PhoneNumber
from numberman.store import unit_of_work


# ═══════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════


class TestNumbermanError:
    """Error taxonomy."""

    def test_inherits_from_base_error(self):
        err = ValidationError("CLIENT_REQUIRED")
        assert isinstance(err, NumbermanError)
        assert isinstance(err, BaseError)
        assert isinstance(err, Exception)

    def test_default_message(self):
        err = NotFoundError("PHONE_NOT_FOUND")
        assert err.message == "Phone number not found"
        assert str(err) == "Phone number not found"

    def test_custom_message(self):
        err = CapacityError("RANGE_TOO_LARGE", message="Too many")
        assert err.message == "Too many"

    def test_unknown_code_falls_back_to_code(self):
        assert ValidationError("SOMETHING_ELSE").message == "SOMETHING_ELSE"

    def test_as_dict(self):
        err = ConflictError("DUPLICATE_NUMBER", numbers=["0100"])
        assert err.as_dict() == {
            "code": "DUPLICATE_NUMBER",
            "message": "Phone number already exists",
            "data": {"numbers": ["0100"]},
        }

    @pytest.mark.parametrize(
        "error, kind, status",
        [
            (ValidationError("X"), "validation", 400),
            (CapacityError("X"), "capacity", 400),
            (ForbiddenError("ADMIN_REQUIRED"), "forbidden", 403),
            (ForbiddenError("NOT_AUTHENTICATED"), "forbidden", 401),
            (NotFoundError("X"), "not_found", 404),
            (ConflictError("X"), "conflict", 409),
            (StoreError("X"), "store", 500),
        ],
    )
    def test_kind_and_status(self, error, kind, status):
        assert error.kind == kind
        assert error.http_status == status

    def test_repr(self):
        assert repr(NotFoundError("PHONE_NOT_FOUND")) == (
            "NotFoundError('PHONE_NOT_FOUND', 'Phone number not found')"
        )


# ═══════════════════════════════════════════════════════════════════
# Unit of work
# ═══════════════════════════════════════════════════════════════════


@pytest.mark.django_db
class TestUnitOfWork:
    """store.unit_of_work() maps database failures."""

    def test_commits(self):
        with unit_of_work():
            PhoneNumber.objects.create(number="0100")
        assert PhoneNumber.objects.filter(number="0100").exists()

    def test_integrity_error_becomes_conflict(self):
        with pytest.raises(ConflictError) as exc:
            with unit_of_work("DUPLICATE_NUMBER", number="0100"):
                raise IntegrityError("UNIQUE constraint failed")
        assert exc.value.code == "DUPLICATE_NUMBER"
        assert exc.value.data == {"number": "0100"}
        assert isinstance(exc.value.__cause__, IntegrityError)

    def test_real_unique_violation(self):
        PhoneNumber.objects.create(number="0100")
        with pytest.raises(ConflictError):
            with unit_of_work():
                PhoneNumber.objects.create(number="0100")

    def test_database_error_becomes_store_error(self):
        with pytest.raises(StoreError) as exc:
            with unit_of_work():
                raise DatabaseError("disk I/O error")
        assert exc.value.code == "STORE_FAILURE"
        assert "disk" not in exc.value.message

    def test_rolls_back_on_caller_error(self):
        """Errors raised inside the block propagate unchanged and undo the writes."""
        with pytest.raises(NotFoundError):
            with unit_of_work():
                PhoneNumber.objects.create(number="0100")
                raise NotFoundError("PHONE_NOT_FOUND")
        assert not PhoneNumber.objects.exists()


# ═══════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════


class TestSettings:
    def test_defaults(self):
        defaults = NumbermanSettings()
        assert defaults.MAX_RANGE_SIZE == 10000
        assert defaults.DEFAULT_PAGE_SIZE == 50
        assert defaults.MAX_PAGE_SIZE == 500
        assert defaults.DEASSIGN_RECORDS_PREVIOUS_CLIENT is True

    def test_override_is_read_lazily(self, settings):
        settings.NUMBERMAN = {"MAX_RANGE_SIZE": 5}
        assert numberman_settings.MAX_RANGE_SIZE == 5
        assert numberman_settings.MAX_PAGE_SIZE == 500
