from __future__ import annotations

import os
import time
from dataclasses import dataclass

from src.adapters.aws import dynamodb_client
from src.adapters.persistence.file_credential_store import CREDENTIAL_KEY
from src.app.ports.output import ICredentialStore


@dataclass(slots=True)
class DynamoDbCredentialStore(ICredentialStore):
    """Keeps each client's bearer credential as one DynamoDB item.

    Items are keyed `<prefix>#<client key>`.

    Env vars:
      - CREDENTIAL_TABLE (default: busnotify-credentials)
      - CREDENTIAL_KEY_PREFIX (default: authIdToken)
      - ENDPOINT_URL (preferred for LocalStack)
      - AWS_REGION
    """

    table_name: str | None = None
    key_prefix: str | None = None

    def _table(self) -> str:
        return (
            self.table_name or os.getenv("CREDENTIAL_TABLE") or "busnotify-credentials"
        )

    def _key(self, client_key: str) -> dict:
        prefix = self.key_prefix or os.getenv("CREDENTIAL_KEY_PREFIX") or CREDENTIAL_KEY
        return {"key": {"S": f"{prefix}#{client_key}"}}

    def get(self, client_key: str) -> str | None:
        ddb = dynamodb_client()
        resp = ddb.get_item(
            TableName=self._table(), Key=self._key(client_key), ConsistentRead=True
        )
        item = resp.get("Item")
        if not item:
            return None
        return item.get("token", {}).get("S") or None

    def put(self, client_key: str, token: str) -> None:
        now_ms = int(time.time() * 1000)
        ddb = dynamodb_client()
        ddb.put_item(
            TableName=self._table(),
            Item={
                **self._key(client_key),
                "token": {"S": token},
                "updated_at_ms": {"N": str(now_ms)},
            },
        )

    def clear(self, client_key: str) -> None:
        ddb = dynamodb_client()
        ddb.delete_item(TableName=self._table(), Key=self._key(client_key))
