"""Shared argument-spec fragments, fixtures and small helpers."""

import sys

AUTH_OPTIONS = {
    "iam_token": {
        "description": "An IAM bearer token used to authenticate against the API.",
        "required": True,
        "type": "str",
        "no_log": True,  # Sensitive information, do not log
    },
    "api_url": {
        "description": "Fully qualified URL of the service endpoint.",
        "required": True,
        "type": "str",
    },
}

AUTH_FIXTURE = {
    "iam_token": "eyJraWQiOiIyMDIzMDcxMDA4MzEiLCJhbGciOiJSUzI1NiJ9.fixture",
    "api_url": "https://sm.example.cloud.ibm.com",
}

STATE_OPTIONS = {
    "state": {
        "description": "Should the resource be present or absent.",
        "choices": ["present", "absent"],
        "default": "present",
        "type": "str",
    },
    "id": {
        "description": "The identifier of an existing resource to manage.",
        "type": "str",
    },
}

WAITER_OPTIONS = {
    "wait": {
        "description": "A boolean value that defines whether to wait for asynchronous provisioning to complete.",
        "default": True,
        "type": "bool",
    },
    "timeout": {
        "description": "The maximum number of seconds to wait for asynchronous provisioning to complete.",
        "default": 3600,
        "type": "int",
    },
    "interval": {
        "description": "The interval in seconds for polling the provisioning status.",
        "default": 10,
        "type": "int",
    },
}

# Media types of the collection envelopes used by the Secrets Manager API.
SECRET_COLLECTION_TYPE = "application/vnd.ibm.secrets-manager.secret+json"
SECRET_GROUP_COLLECTION_TYPE = "application/vnd.ibm.secrets-manager.secret.group+json"
CONFIG_COLLECTION_TYPE = "application/vnd.ibm.secrets-manager.config+json"


def first_item(value):
    """
    Unwraps the one-of-one nested block convention: `[{...}]` and `{...}` both
    yield the inner mapping, an empty list yields None.
    """
    if isinstance(value, list):
        return value[0] if value else None
    return value


def collection_envelope(collection_type: str, resources: list) -> dict:
    """Wraps request resources into the API's metadata/resources envelope."""
    return {
        "metadata": {
            "collection_type": collection_type,
            "collection_total": len(resources),
        },
        "resources": resources,
    }


class ValidationErrorCollector:
    """A simple class to collect and report validation errors."""

    def __init__(self):
        self.errors = []

    def add_error(self, message: str):
        self.errors.append(message)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def report(self):
        """Prints all collected errors to stderr and exits if any exist."""
        if self.has_errors:
            print(
                "\nGeneration failed with the following configuration errors:",
                file=sys.stderr,
            )
            for i, error in enumerate(self.errors, 1):
                print(f"  {i}. {error}", file=sys.stderr)
            sys.exit(1)
