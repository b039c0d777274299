"""Resolution of SSLCommerz credentials from the persisted payment settings.

The settings document lives in one SSM SecureString parameter, shaped like
the host platform's payment settings (a list of payment methods, each with
a list of named fields). It is parsed through the PaymentSettings schema
and fails closed: anything missing raises CredentialsError.
"""

import os

from pydantic import ValidationError

from ..models.credentials import GATEWAY_NAME, ClientCredentials, PaymentSettings
from ..models.errors import CredentialsError, ErrorCode
from ..utils.logging import get_logger
from .ssm_service import SSMService, SSMServiceError, get_ssm_service

logger = get_logger(__name__)


class GatewaySettingsService:
    """Loads gateway credentials from SSM."""

    def __init__(
        self,
        ssm: SSMService | None = None,
        *,
        parameter_name: str | None = None,
        environment: str | None = None,
    ) -> None:
        """Initialize the settings service.

        Args:
            ssm: SSM service. Defaults to the shared instance.
            parameter_name: Settings parameter path. Defaults to the
                PAYMENT_SETTINGS_PARAMETER env var.
            environment: Environment name (dev, prod). Defaults to ENVIRONMENT env var.
        """
        self._environment = environment or os.environ.get("ENVIRONMENT", "dev")
        self._ssm = ssm or get_ssm_service()
        self.parameter_name = parameter_name or os.environ.get(
            "PAYMENT_SETTINGS_PARAMETER",
            f"/tutor/{self._environment}/payment_settings",
        )

    def load_settings(self) -> PaymentSettings:
        """Fetch and parse the payment settings document.

        Raises:
            CredentialsError: If the parameter is missing or malformed.
        """
        try:
            raw = self._ssm.get_parameter(self.parameter_name)
        except SSMServiceError as e:
            logger.warning("Payment settings unavailable: %s", e)
            raise CredentialsError(
                ErrorCode.GATEWAY_NOT_CONFIGURED,
                details={"parameter": self.parameter_name},
            ) from e

        try:
            return PaymentSettings.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Payment settings %s failed schema validation (%d errors)",
                self.parameter_name,
                e.error_count(),
            )
            raise CredentialsError(
                ErrorCode.GATEWAY_NOT_CONFIGURED,
                details={"parameter": self.parameter_name},
            ) from e

    def get_credentials(self, gateway: str = GATEWAY_NAME) -> ClientCredentials:
        """Resolve immutable credentials for the gateway.

        Raises:
            CredentialsError: If the gateway block is absent or incomplete.
        """
        return ClientCredentials.from_settings(self.load_settings(), gateway)
