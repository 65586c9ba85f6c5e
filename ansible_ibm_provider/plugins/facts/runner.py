import logging

from ansible_ibm_provider.errors import ProviderError
from ansible_ibm_provider.interfaces.runner import BaseRunner
from ansible_ibm_provider.marshal.family import decode_record, encode_record

logger = logging.getLogger(__name__)


class FactsRunner(BaseRunner):
    """
    Lists a collection and returns every element decoded and flattened. It
    never changes anything.

    Context keys:

    - `resource_type`: human-readable name used in messages.
    - `list_path`: the collection endpoint.
    - `model`: the record model elements are decoded with, unless `decode`
      is overridden.
    - `query_params`: module parameters forwarded as query parameters.
    - `path_params`: module parameters substituted into `list_path`.
    """

    def run(self):
        try:
            body, _ = self.client.send_request(
                "GET",
                self.context["list_path"],
                query_params=self.query_params(),
                path_params=self.path_params(),
                operation=f"List {self.context['resource_type']}",
            )
            body = body or {}
            resources = [self.flatten(self.decode(item)) for item in self.items(body)]
        except ProviderError as e:
            self.fail(e)
            return

        logger.debug(
            "Listed %s %s item(s)", len(resources), self.context["resource_type"]
        )
        self.module.exit_json(
            changed=False,
            resources=resources,
            metadata=body.get("metadata") if isinstance(body, dict) else None,
        )

    def query_params(self) -> dict:
        names = self.context.get("query_params", [])
        return {
            name: self.params[name]
            for name in names
            if self.params.get(name) is not None
        }

    def path_params(self) -> dict | None:
        names = self.context.get("path_params", [])
        return {name: self.params[name] for name in names} or None

    def items(self, body) -> list:
        if isinstance(body, list):
            return body
        return body.get("resources") or []

    def decode(self, item):
        return decode_record(self.context["model"], item)

    def flatten(self, record) -> dict:
        return encode_record(record, wrap_nested=False)
