"""DynamoDB access for the bridge's tables.

Table names are `{prefix}-{table}`. The prefix is `tutor-{ENVIRONMENT}`
unless DYNAMODB_TABLE_PREFIX overrides it.
"""

import os
from typing import Any, Mapping

import boto3
from botocore.exceptions import ClientError

_service: "DynamoDBService | None" = None


def get_dynamodb_service() -> "DynamoDBService":
    """Return the shared DynamoDBService, creating it on first use."""
    global _service
    if _service is None:
        _service = DynamoDBService()
    return _service


def reset_dynamodb_service() -> None:
    """Drop the shared instance (for testing only).

    The next call to get_dynamodb_service builds a new boto3 resource,
    which lets tests create it inside a mock_aws context.
    """
    global _service
    _service = None


def _condition_failed(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class DynamoDBService:
    """Keyed reads and conditional updates on prefixed tables."""

    def __init__(
        self, environment: str | None = None, *, table_prefix: str | None = None
    ) -> None:
        """Initialize the service.

        Args:
            environment: Environment name. Defaults to ENVIRONMENT env var.
            table_prefix: Explicit prefix, overriding the environment.
        """
        environment = environment or os.getenv("ENVIRONMENT", "dev")
        self.table_prefix = table_prefix or os.getenv(
            "DYNAMODB_TABLE_PREFIX", f"tutor-{environment}"
        )
        self._resource = boto3.resource("dynamodb")
        self._tables: dict[str, Any] = {}

    def table_name(self, table: str) -> str:
        return f"{self.table_prefix}-{table}"

    def table(self, table: str) -> Any:
        """Table resource for an unprefixed table name."""
        if table not in self._tables:
            self._tables[table] = self._resource.Table(self.table_name(table))
        return self._tables[table]

    def get_item(self, table: str, key: Mapping[str, Any]) -> dict[str, Any] | None:
        """Strongly consistent read of one item, or None."""
        response = self.table(table).get_item(Key=dict(key), ConsistentRead=True)
        return response.get("Item")

    def update_existing(
        self, table: str, key: Mapping[str, Any], values: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """SET attributes on an existing item in one conditional UpdateItem.

        The condition keeps the update from creating an item when the key
        is unknown.

        Args:
            table: Unprefixed table name
            key: Primary key of the item
            values: Attribute name to new value

        Returns:
            All attributes after the update, or None if no item has the key
        """
        names: dict[str, str] = {}
        placeholders: dict[str, Any] = {}
        assignments = []
        for index, (attribute, value) in enumerate(values.items()):
            names[f"#a{index}"] = attribute
            placeholders[f":v{index}"] = value
            assignments.append(f"#a{index} = :v{index}")
        names["#key"] = next(iter(key))

        try:
            response = self.table(table).update_item(
                Key=dict(key),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="attribute_exists(#key)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=placeholders,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _condition_failed(e):
                return None
            raise
        return response.get("Attributes")
