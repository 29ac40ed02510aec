"""Unit tests for request/response DTOs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from schemas.dto.requests.contact import ContactRequest, HumanVerificationFields
from schemas.dto.responses.verification import HumanVerificationErrorResponse
from errors import HumanVerificationError


class TestHumanVerificationFields:
    def test_camel_case_aliases(self):
        fields = HumanVerificationFields.model_validate(
            {"recaptchaToken": "r", "privateAccessToken": "p"}
        )
        assert fields.recaptcha_token == "r"
        assert fields.private_access_token == "p"

    def test_private_token_legacy_alias(self):
        fields = HumanVerificationFields.model_validate({"privateToken": "legacy"})
        assert fields.private_access_token == "legacy"

    def test_tokens_optional(self):
        fields = HumanVerificationFields.model_validate({})
        assert fields.recaptcha_token is None
        assert fields.private_access_token is None


class TestContactRequest:
    def test_valid(self):
        req = ContactRequest.model_validate(
            {"name": " Ana ", "email": "ana@example.com", "message": "Hi"}
        )
        assert req.name == "Ana"

    @pytest.mark.parametrize("missing", ["name", "email", "message"])
    def test_required_fields(self, missing):
        body = {"name": "Ana", "email": "ana@example.com", "message": "Hi"}
        body.pop(missing)
        with pytest.raises(PydanticValidationError):
            ContactRequest.model_validate(body)

    def test_message_limit(self):
        with pytest.raises(PydanticValidationError):
            ContactRequest.model_validate(
                {"name": "Ana", "email": "a@b.c", "message": "x" * 5001}
            )


def test_denial_response_matches_error_shape():
    err = HumanVerificationError("m", error_code="PAT_REJECTED", details={"isValid": False})
    resp = HumanVerificationErrorResponse.model_validate(err.to_dict())
    assert resp.error == "PAT_REJECTED"
    assert resp.details == {"isValid": False}
