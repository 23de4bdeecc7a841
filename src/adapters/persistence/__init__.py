from .dynamodb_credential_store import DynamoDbCredentialStore
from .file_credential_store import FileCredentialStore

__all__ = [
    "DynamoDbCredentialStore",
    "FileCredentialStore",
]
