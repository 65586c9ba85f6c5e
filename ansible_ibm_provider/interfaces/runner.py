import json
import logging

from ansible.module_utils.basic import AnsibleModule

from ansible_ibm_provider.errors import ProviderError, ProvisioningFailed
from ansible_ibm_provider.interfaces.client import ApiClient

logger = logging.getLogger(__name__)


class BaseRunner:
    """
    Abstract base class for all module runners.

    A runner owns one module invocation: it reads the module parameters, talks
    to the remote service through the injected client and reports the outcome
    through `exit_json`/`fail_json`.
    """

    def __init__(self, module: AnsibleModule, context: dict, client: ApiClient):
        """
        Initializes the runner.

        Args:
            module: The AnsibleModule instance.
            context: Static configuration of the resource type (paths,
                mutable fields, ...).
            client: The client used for every remote call.
        """
        self.module = module
        self.context = context
        self.client = client
        self.has_changed = False
        self.resource = None
        self.identifier = None
        self.commands = []

    def run(self):
        """
        The main execution method for the runner.
        This method should be implemented by all subclasses.
        """
        raise NotImplementedError

    @property
    def params(self) -> dict:
        return self.module.params

    def warn(self, message: str):
        logger.warning(message)
        self.module.warn(message)

    def exit(self):
        """Formats the final response and exits the module execution."""
        self.module.exit_json(
            changed=self.has_changed,
            id=self.identifier,
            resource=self.resource,
            commands=[command.to_dict() for command in self.commands],
        )

    def fail(self, error: ProviderError):
        """Reports a provider error as a module failure."""
        logger.error("%s failed: %s", self.context.get("resource_type"), error)
        details = {}
        if isinstance(error, ProvisioningFailed) and error.resource is not None:
            details["resource"] = error.resource
        self.module.fail_json(msg=str(error), **details)

    def _normalize_for_comparison(self, value):
        """
        Normalizes a value into an order-insensitive, comparable form.

        Lists of hashable values become sets. Lists of dictionaries become sets
        of canonical JSON strings. Anything else is returned unchanged.
        """
        if not isinstance(value, list):
            return value
        if not value:
            return set()
        if isinstance(value[0], dict):
            return {
                json.dumps(item, sort_keys=True, separators=(",", ":"))
                for item in value
            }
        try:
            return set(value)
        except TypeError:
            return value

    def values_differ(self, desired, current) -> bool:
        return self._normalize_for_comparison(
            desired
        ) != self._normalize_for_comparison(current)
