"""Gateway settings schema and the credentials derived from it."""

from typing import Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
)

from .enums import Environment
from .errors import CredentialsError, ErrorCode

GATEWAY_NAME = "sslcommerz"

SANDBOX_API_DOMAIN = "https://sandbox.sslcommerz.com"
LIVE_API_DOMAIN = "https://securepay.sslcommerz.com"


class SettingsField(BaseModel):
    """One admin-configured field of a payment method."""

    model_config = ConfigDict(extra="ignore", hide_input_in_errors=True)

    name: str | None = None
    value: str | None = None


class PaymentMethodSettings(BaseModel):
    """Settings block of a single payment method."""

    model_config = ConfigDict(extra="ignore", hide_input_in_errors=True)

    name: str
    fields: list[SettingsField] = Field(default_factory=list)

    def field_values(self) -> dict[str, str]:
        """Map field name to value, skipping fields missing either."""
        return {
            field.name: field.value
            for field in self.fields
            if field.name is not None and field.value is not None
        }


class PaymentSettings(BaseModel):
    """The persisted payment settings document."""

    model_config = ConfigDict(extra="ignore", hide_input_in_errors=True)

    payment_methods: list[PaymentMethodSettings] = Field(default_factory=list)

    def gateway(self, name: str = GATEWAY_NAME) -> PaymentMethodSettings | None:
        """Return the settings block for a gateway, if present."""
        for method in self.payment_methods:
            if method.name == name:
                return method
        return None


class ClientCredentials(BaseModel):
    """Immutable SSLCommerz merchant credentials.

    Built once per delivery from the persisted settings. The store password
    is a SecretStr so it never shows up in reprs or logs.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", hide_input_in_errors=True)

    store_id: str
    store_password: SecretStr
    environment: Environment

    @field_validator("store_id", mode="before")
    @classmethod
    def _require_store_id(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
        if not value:
            raise ValueError("store_id must not be empty")
        return value

    @field_validator("store_password", mode="before")
    @classmethod
    def _require_store_password(cls, value: object) -> object:
        raw = value.get_secret_value() if isinstance(value, SecretStr) else value
        if not raw:
            raise ValueError("store_password must not be empty")
        return value

    @property
    def api_domain(self) -> str:
        """Base URL of the SSLCommerz API for this environment."""
        if self.environment is Environment.SANDBOX:
            return SANDBOX_API_DOMAIN
        return LIVE_API_DOMAIN

    @property
    def verify_tls(self) -> bool:
        """Certificate verification is off for sandbox, on for live."""
        return self.environment is Environment.LIVE

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> "ClientCredentials":
        """Build credentials from a field-name to value mapping.

        Args:
            fields: Settings fields (environment, store_id, store_password)

        Returns:
            Validated credentials.

        Raises:
            CredentialsError: If any required field is missing or empty.
        """
        try:
            return cls(
                store_id=fields.get("store_id", ""),
                store_password=fields.get("store_password", ""),
                environment=fields.get("environment", ""),
            )
        except ValidationError as e:
            missing = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise CredentialsError(
                ErrorCode.CREDENTIALS_INCOMPLETE,
                details={"fields": ",".join(missing)},
            ) from e

    @classmethod
    def from_settings(
        cls, settings: PaymentSettings, gateway: str = GATEWAY_NAME
    ) -> "ClientCredentials":
        """Select the gateway block from the settings and build credentials.

        Raises:
            CredentialsError: If the block is absent or incomplete.
        """
        method = settings.gateway(gateway)
        if method is None:
            raise CredentialsError(
                ErrorCode.GATEWAY_NOT_CONFIGURED, details={"gateway": gateway}
            )
        return cls.from_fields(method.field_values())
