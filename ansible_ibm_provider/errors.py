"""
Error taxonomy shared by the marshaling layer, the API client, the poller and
the runners.

Library code raises these exceptions. Runners catch `ProviderError` at the
`run()` boundary and report it through `module.fail_json`, so nothing below the
runner ever talks to Ansible directly about failures.
"""


class ProviderError(Exception):
    """Base class for every error raised while managing a remote resource."""


class ParameterError(ProviderError):
    """A module parameter is missing or inconsistent with the others."""


class InvalidIdentifier(ProviderError):
    """A composite identifier does not have the expected shape."""

    def __init__(self, value: str, expected_segments: int):
        self.value = value
        self.expected_segments = expected_segments
        super().__init__(
            f"Identifier '{value}' is not a '/'-separated list of "
            f"{expected_segments} non-empty segments."
        )


class NotFound(ProviderError):
    """The remote service answered a lookup with HTTP 404."""

    def __init__(self, operation: str, identifier: str | None = None):
        self.operation = operation
        self.identifier = identifier
        target = f" '{identifier}'" if identifier else ""
        super().__init__(f"{operation}: resource{target} was not found.")


class RemoteError(ProviderError):
    """Any other transport or API failure, with enough context to diagnose it."""

    def __init__(
        self,
        operation: str,
        status: int | None,
        details: str = "",
        identifier: str | None = None,
    ):
        self.operation = operation
        self.status = status
        self.details = details
        self.identifier = identifier
        target = f" for '{identifier}'" if identifier else ""
        msg = f"{operation} failed{target}. Status: {status}."
        if details:
            msg = f"{msg} {details}"
        super().__init__(msg)


class UnrecognizedVariant(ProviderError):
    """A value matches none of the known members of a variant family."""

    def __init__(self, family: str, value=None):
        self.family = family
        self.value = value
        if value is None:
            msg = f"Unable to determine the '{family}' variant."
        else:
            msg = f"'{value}' is not a recognized '{family}' variant."
        super().__init__(msg)


class TypeMismatch(ProviderError):
    """A field value cannot be coerced to its declared semantic type."""

    def __init__(self, field: str, reason: str = ""):
        self.field = field
        self.reason = reason
        msg = f"Field '{field}' has an invalid value"
        super().__init__(f"{msg}: {reason}" if reason else f"{msg}.")


class ForceNewChange(ProviderError):
    """A parameter that can only be set at creation time differs from the resource."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(
            f"Cannot update resource property '{field}' in place. "
            "The resource must be re-created to update this property."
        )


class WaitTimeout(ProviderError):
    """The poller ran out of time before a terminal status was observed."""

    def __init__(self, identifier: str, timeout: float, last_status: str | None):
        self.identifier = identifier
        self.timeout = timeout
        self.last_status = last_status
        super().__init__(
            f"Timeout waiting {timeout} seconds for resource {identifier} to reach "
            f"a terminal state. Last observed status: '{last_status}'."
        )


class ProvisioningFailed(ProviderError):
    """The remote service reported a terminal failure status for a resource."""

    def __init__(self, identifier: str, status: str, resource: dict | None = None):
        self.identifier = identifier
        self.status = status
        self.resource = resource
        super().__init__(
            f"Resource {identifier} finished provisioning with status '{status}'."
        )
