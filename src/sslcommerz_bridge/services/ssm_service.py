"""SSM Parameter Store access for the payment settings document.

Values are decrypted on read and cached for the lifetime of the process,
so a warm Lambda container resolves credentials without a round trip.
"""

import logging
from functools import lru_cache

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# Operator hints for the SSM error codes worth distinguishing
_ERROR_HINTS = {
    "ParameterNotFound": "parameter does not exist",
    "AccessDeniedException": "check IAM permissions for ssm:GetParameter",
    "ParameterVersionNotFound": "parameter version does not exist",
}


class SSMServiceError(Exception):
    """Raised when an SSM parameter cannot be read."""

    def __init__(self, message: str, not_found: bool = False) -> None:
        super().__init__(message)
        self.not_found = not_found


class SSMService:
    """Cached reader for SecureString parameters.

    Usage:
        ssm = get_ssm_service()
        document = ssm.get_parameter("/tutor/dev/payment_settings")
    """

    def __init__(self, client=None) -> None:
        self._client = client or boto3.client("ssm")
        self._cache: dict[str, str] = {}

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Return the decrypted value of a parameter.

        Args:
            name: Full parameter path
            use_cache: Serve a previously read value if present

        Raises:
            SSMServiceError: If the parameter cannot be read.
        """
        if use_cache and name in self._cache:
            return self._cache[name]

        logger.info("Reading SSM parameter %s", name)
        try:
            response = self._client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            hint = _ERROR_HINTS.get(code, code)
            raise SSMServiceError(
                f"Cannot read SSM parameter {name}: {hint}",
                not_found=code == "ParameterNotFound",
            ) from e

        value = response["Parameter"]["Value"]
        self._cache[name] = value
        return value

    def clear_cache(self) -> None:
        """Forget every cached value."""
        self._cache.clear()


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService instance."""
    return SSMService()


def reset_ssm_service() -> None:
    """Drop the shared instance and its cache (for testing only)."""
    get_ssm_service.cache_clear()
