"""Schemas — boundary validation for auth, user and transfer payloads.

Tests cover:
    - names are stripped and must stay non-empty
    - UserUpdate requires at least one field
    - TransferCreate requires a positive recipient id; good_job_id optional
"""

import pytest
from pydantic import ValidationError

from goodjob.schemas.auth import RegisterRequest
from goodjob.schemas.good_job import GoodJobCreate, TransferCreate
from goodjob.schemas.user import UserCreate, UserUpdate


def test_register_strips_name():
    assert RegisterRequest(name="  alice ", password="pw").name == "alice"


def test_register_rejects_blank_name():
    with pytest.raises(ValidationError):
        RegisterRequest(name="   ", password="pw")


def test_register_rejects_empty_password():
    with pytest.raises(ValidationError):
        RegisterRequest(name="alice", password="")


def test_user_create_defaults_to_member():
    assert UserCreate(name="bob", password="pw").is_admin is False


def test_user_update_requires_a_field():
    with pytest.raises(ValidationError):
        UserUpdate()


def test_user_update_accepts_single_field():
    update = UserUpdate(is_admin=False)
    assert update.is_admin is False
    assert update.name is None


def test_transfer_without_good_job_id():
    body = TransferCreate(to_user_id=3)
    assert body.good_job_id is None
    assert body.from_user_id is None


def test_transfer_rejects_non_positive_recipient():
    with pytest.raises(ValidationError):
        TransferCreate(to_user_id=0)


def test_transfer_requires_recipient():
    with pytest.raises(ValidationError):
        TransferCreate(good_job_id=1)


def test_good_job_create_is_all_optional():
    body = GoodJobCreate()
    assert body.generated_date is None
    assert body.initial_owner_id is None
