"""Tests for provider payload parsing and shared-secret checks."""

import pytest

from trustfeed.errors import AuthError, UpstreamSoftFailure
from trustfeed.services.providers.helius import HeliusMetadataProvider
from trustfeed.services.providers.scorer import ScoreResult
from trustfeed.utils.security import verify_bearer_secret, verify_webhook_secret


class TestScoreResult:
    """Scorer payload mapping"""

    def test_camel_case_payload(self):
        """trustRating and riskFlags are read"""
        result = ScoreResult.from_payload("m", {"trustRating": 72, "riskFlags": ["honeypot"], "name": "Alpha"})

        assert result.rating == 72.0
        assert result.risk_flags == ["honeypot"]
        assert result.name == "Alpha"

    def test_missing_rating(self):
        """No rating is an upstream failure"""
        with pytest.raises(UpstreamSoftFailure):
            ScoreResult.from_payload("m", {"name": "x"})


class TestHeliusParsing:
    """DAS getAsset result mapping"""

    def test_parse_asset(self):
        """Name, symbol and image come from content"""
        asset = {
            "id": "m",
            "content": {
                "metadata": {"name": "Alpha", "symbol": "ALP"},
                "links": {"image": "https://img/a.png"},
            },
        }

        metadata = HeliusMetadataProvider._parse_asset("m", asset)

        assert (metadata.name, metadata.symbol, metadata.image) == ("Alpha", "ALP", "https://img/a.png")
        assert metadata.raw == asset


class TestSecrets:
    """Constant-time secret comparison"""

    def test_no_secret_configured(self):
        """Unset secret skips the check"""
        verify_webhook_secret(None, None)
        verify_bearer_secret(None, "")

    def test_bearer_required_for_internal(self):
        """Plain secret is not enough for internal calls"""
        with pytest.raises(AuthError):
            verify_bearer_secret("s3cret", "s3cret")
        verify_bearer_secret("Bearer s3cret", "s3cret")

    def test_webhook_mismatch(self):
        with pytest.raises(AuthError):
            verify_webhook_secret("Bearer other", "s3cret")
