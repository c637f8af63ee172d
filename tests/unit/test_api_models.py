"""
Unit tests for API request/response models.
"""

import pytest
from pydantic import ValidationError

from habitsphere.api.models import (
    LoginResponse,
    RegisterRequest,
    SaveHabitsRequest,
    UserProfile,
    VerifyEmailRequest,
)


class TestRegisterRequest:
    def test_camel_case_keys_accepted(self) -> None:
        request = RegisterRequest.model_validate(
            {
                "firstName": "Ada",
                "lastName": "Lovelace",
                "email": "ada@example.com",
                "password": "Secret1!",
                "confirmEmail": "ada@example.com",
                "confirmPassword": "Secret1!",
            }
        )
        assert request.first_name == "Ada"
        assert request.confirm_password == "Secret1!"

    def test_missing_confirmation_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            RegisterRequest.model_validate(
                {"firstName": "Ada", "lastName": "L", "email": "a@x.com", "password": "Secret1!"}
            )
        assert "confirmEmail" in str(exc_info.value)

    def test_empty_first_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest.model_validate(
                {
                    "firstName": "",
                    "lastName": "L",
                    "email": "a@x.com",
                    "password": "p",
                    "confirmEmail": "a@x.com",
                    "confirmPassword": "p",
                }
            )


class TestVerifyEmailRequest:
    def test_empty_code_rejected(self) -> None:
        with pytest.raises(ValidationError):
            VerifyEmailRequest(email="a@x.com", code="")


class TestSaveHabitsRequest:
    def test_empty_list_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SaveHabitsRequest(habits=[])

    def test_list_kept_in_order(self) -> None:
        assert SaveHabitsRequest(habits=["Reading", "Exercise"]).habits == ["Reading", "Exercise"]


class TestLoginResponse:
    def test_user_serialized_with_camel_case(self) -> None:
        response = LoginResponse(
            message="Login successful",
            token="tok",
            user=UserProfile(first_name="Ada", last_name="Lovelace", email="ada@example.com"),
        )
        assert response.model_dump(by_alias=True)["user"] == {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
        }
