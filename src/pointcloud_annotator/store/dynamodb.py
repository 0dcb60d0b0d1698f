"""DynamoDB annotation store."""

import logging
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import InfrastructureError
from .base import AnnotationStore

log = logging.getLogger(__name__)

_NUMERIC_FIELDS = ("x", "y", "z")


def _to_dynamo(item: dict[str, Any]) -> dict[str, Any]:
    # DynamoDB rejects Python floats; numbers travel as Decimal.
    return {
        key: Decimal(str(value)) if key in _NUMERIC_FIELDS else value
        for key, value in item.items()
    }


def _from_dynamo(item: dict[str, Any]) -> dict[str, Any]:
    return {
        key: float(value) if isinstance(value, Decimal) else value
        for key, value in item.items()
    }


class DynamoAnnotationStore(AnnotationStore):
    """Rows live in a DynamoDB table whose partition key is ``annotationId``."""

    name = "dynamodb"

    def __init__(self, table) -> None:
        self.table = table

    @classmethod
    def from_settings(cls, settings) -> "DynamoAnnotationStore":
        resource = boto3.resource(
            "dynamodb",
            region_name=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint,
        )
        return cls(resource.Table(settings.table_name))

    def put(self, item: dict[str, Any]) -> None:
        try:
            self.table.put_item(Item=_to_dynamo(item))
        except (BotoCoreError, ClientError) as e:
            raise InfrastructureError("put", str(e)) from e

    def scan(self) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {}
        try:
            while True:
                resp = self.table.scan(**kwargs)
                items.extend(_from_dynamo(item) for item in resp.get("Items", []))
                last_key = resp.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (BotoCoreError, ClientError) as e:
            raise InfrastructureError("scan", str(e)) from e
        log.debug("Scanned %d annotations from %s", len(items), self.table.name)
        return items

    def delete(self, annotation_id: str) -> None:
        try:
            self.table.delete_item(Key={"annotationId": annotation_id})
        except (BotoCoreError, ClientError) as e:
            raise InfrastructureError("delete", str(e)) from e
