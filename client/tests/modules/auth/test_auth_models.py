"""Tests for auth module models."""

import pytest
from pydantic import ValidationError

from shared.models import UserData

from modules.auth import AuthCheckResponse, AuthResponse, AuthState, AuthStatus, SignupRequest


class TestAuthState:
    def test_starts_loading(self):
        """A new state is loading with no user."""
        state = AuthState()

        assert state.is_loading
        assert not state.is_authenticated
        assert state.user is None

    def test_authenticated_with_user(self):
        """An authenticated state may carry a user."""
        state = AuthState.authenticated(UserData(username="thrall"))

        assert state.is_authenticated
        assert state.user.username == "thrall"

    @pytest.mark.parametrize("status", [AuthStatus.LOADING, AuthStatus.UNAUTHENTICATED])
    def test_user_requires_authentication(self, status):
        """A user on a non-authenticated state is rejected."""
        with pytest.raises(ValidationError):
            AuthState(status=status, user=UserData(username="thrall"))

    def test_unauthenticated(self):
        """The unauthenticated state has no user."""
        state = AuthState.unauthenticated()

        assert not state.is_authenticated
        assert not state.is_loading
        assert state.user is None


class TestRequestModels:
    def test_signup_rejects_bad_email(self):
        """Signup requests validate the email address."""
        with pytest.raises(ValidationError):
            SignupRequest(username="thrall", email="not-an-email", password="lok'tar")

    def test_signup_serializes_captcha(self):
        """Signup requests carry the captcha token."""
        request = SignupRequest(
            username="thrall",
            email="thrall@example.com",
            password="lok'tar",
            captcha_token="captcha-1",
        )

        assert request.model_dump(mode="json")["captcha_token"] == "captcha-1"


class TestResponseModels:
    def test_auth_response_user(self):
        """AuthResponse parses the nested user."""
        response = AuthResponse.model_validate({"message": "ok", "user": {"username": "jaina"}})
        assert response.user.username == "jaina"

    def test_auth_check_defaults_false(self):
        """A check response without the flag means unauthenticated."""
        assert AuthCheckResponse.model_validate({}).authenticated is False
