"""
Shared test configuration.

Every test runs in an empty temporary directory (so no .env file is read)
with the verification-related environment variables removed. Tests control
configuration exclusively through monkeypatch.setenv() or explicit kwargs.
"""

import pytest

_ENV_VARS = (
    "ENV",
    "NODE_ENV",
    "HUMAN_VERIFICATION_BYPASS",
    "RECAPTCHA_TEST_BYPASS",
    "RECAPTCHA_MIN_SCORE",
    "RECAPTCHA_SECRET_KEY",
    "RECAPTCHA_SECRET",
    "RECAPTCHA_VERIFY_URL",
    "RECAPTCHA_HTTP_TIMEOUT_MS",
    "PAT_VERIFICATION_URL",
    "PAT_ISSUER_ID",
    "PAT_ISSUER",
    "PAT_KEY_ID",
    "PAT_KEYID",
    "PAT_TEAM_ID",
    "PAT_ORIGIN",
    "APP_ORIGIN",
    "PAT_HTTP_TIMEOUT_MS",
    "CONTACT_WEBHOOK",
    "CONTACT_REQUIRE_HUMAN_VERIFICATION",
    "SENTRY_DSN",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
