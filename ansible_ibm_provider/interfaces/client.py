import json
import logging
from urllib.parse import quote, urlencode

from ansible.module_utils.basic import AnsibleModule
from ansible.module_utils.urls import fetch_url

from ansible_ibm_provider.errors import NotFound, RemoteError

logger = logging.getLogger(__name__)

SUCCESS_CODES = (200, 201, 202, 204)


class ApiClient:
    """
    A thin wrapper around Ansible's `fetch_url` for the IBM Cloud REST APIs.

    The client is created once per module invocation and handed to the runner
    explicitly, so tests can substitute it with a mock.

    Args:
        module: The AnsibleModule whose connection settings `fetch_url` uses.
        api_url: The service endpoint, e.g. `https://<instance>.<region>.secrets-manager.appdomain.cloud`.
        token: The IAM bearer token.
        version: An API version date appended as the `version` query parameter
            to every request, required by versioned services like Direct Link.
    """

    def __init__(
        self,
        module: AnsibleModule,
        api_url: str,
        token: str,
        version: str | None = None,
        timeout: int = 30,
    ):
        self.module = module
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.version = version
        self.timeout = timeout

    @classmethod
    def from_module(cls, module: AnsibleModule, version: str | None = None):
        return cls(
            module,
            module.params["api_url"],
            module.params["iam_token"],
            version=version,
        )

    def build_url(self, path, query_params=None, path_params=None) -> str:
        if path_params:
            # Path segments are quoted so that identifiers cannot alter the route.
            path = path.format(
                **{key: quote(str(value), safe="") for key, value in path_params.items()}
            )

        if path.startswith("http://") or path.startswith("https://"):
            url = path
        else:
            url = f"{self.api_url}/{path.lstrip('/')}"

        params = dict(query_params or {})
        if self.version:
            params.setdefault("version", self.version)
        if params:
            # Convert list values to repeated parameters
            encoded_params = []
            for key, value in params.items():
                if value is None:
                    continue
                if isinstance(value, list):
                    for v in value:
                        encoded_params.append((key, v))
                else:
                    encoded_params.append((key, value))
            if encoded_params:
                url += "?" + urlencode(encoded_params)
        return url

    def send_request(
        self,
        method,
        path,
        data=None,
        query_params=None,
        path_params=None,
        operation=None,
        identifier=None,
    ) -> tuple:
        """
        Sends a request and decodes the JSON response body.

        Returns:
            A `(body, status_code)` tuple. `body` is None for empty responses.

        Raises:
            KeyError: if `path` references a placeholder missing in `path_params`.
            NotFound: if the service answers with 404.
            RemoteError: for any other failure status, and for a success status
                whose body is not valid JSON.
        """
        operation = operation or f"{method} {path}"
        url = self.build_url(path, query_params, path_params)

        if data is not None and not isinstance(data, str):
            data = self.module.jsonify(data)

        logger.debug("%s %s", method, url)
        response, info = fetch_url(
            self.module,
            url,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            method=method,
            data=data,
            timeout=self.timeout,
        )

        body_content = None
        if response:
            body_content = response.read()
        elif info.get("body"):
            body_content = info["body"]

        status_code = info["status"]

        if status_code == 404:
            raise NotFound(operation, identifier)

        if status_code not in SUCCESS_CODES:
            error_details = info.get("msg") or ""
            if body_content:
                try:
                    error_json = json.loads(body_content)
                    error_details = f"API Response: {json.dumps(error_json, indent=2)}"
                except (json.JSONDecodeError, TypeError):
                    if isinstance(body_content, bytes):
                        body_content = body_content.decode(errors="ignore")
                    error_details = f"API Response (raw): {body_content}"
            raise RemoteError(operation, status_code, error_details, identifier)

        if not body_content:
            return None, status_code

        try:
            return json.loads(body_content), status_code
        except json.JSONDecodeError:
            raise RemoteError(
                operation,
                status_code,
                "The API returned a success status but the response was not valid JSON.",
                identifier,
            ) from None
