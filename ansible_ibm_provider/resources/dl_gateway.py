import re
import time

from ansible_ibm_provider.errors import ParameterError, ProvisioningFailed
from ansible_ibm_provider.families.gateways import (
    CONNECTION_MODES,
    GATEWAY_TEMPLATE_FAMILY,
    SELF_PROVISIONING_PROVIDERS,
    STATUS_CREATE_REJECTED,
    STATUS_FAILED,
    STATUS_PROVISIONED,
    Gateway,
    GatewayType,
    Port,
    flatten_gateway,
)
from ansible_ibm_provider.helpers import AUTH_OPTIONS, STATE_OPTIONS, WAITER_OPTIONS
from ansible_ibm_provider.interfaces.poller import StatusPoller, TerminalStates
from ansible_ibm_provider.marshal.family import decode_record
from ansible_ibm_provider.marshal.fields import missing_fields
from ansible_ibm_provider.models import ResourceDefinition
from ansible_ibm_provider.plugins.crud.runner import CrudRunner

GATEWAY_NAME_PATTERN = re.compile(r"^([a-zA-Z]|[a-zA-Z][-_a-zA-Z0-9]*[a-zA-Z0-9])$")
GATEWAY_NAME_MAX_LENGTH = 63
BFD_INTERVAL_RANGE = (300, 255000)
BFD_MULTIPLIER_RANGE = (1, 255)
DEFAULT_BFD_MULTIPLIER = 3

GATEWAY_TERMINAL_STATES = TerminalStates(
    success={STATUS_PROVISIONED},
    failure={STATUS_FAILED, STATUS_CREATE_REJECTED},
)

# Parameters copied into the creation template as they are.
TEMPLATE_PARAMS = [
    "name",
    "type",
    "speed_mbps",
    "global",
    "bgp_asn",
    "metered",
    "bgp_base_cidr",
    "bgp_cer_cidr",
    "bgp_ibm_cidr",
    "connection_mode",
    "carrier_name",
    "cross_connect_router",
    "customer_name",
    "location_name",
]

DEDICATED_ONLY_PARAMS = [
    "carrier_name",
    "cross_connect_router",
    "customer_name",
    "location_name",
]

MACSEC_OPTIONS = ["active", "primary_cak", "fallback_cak", "window_size"]


def _macsec_template(macsec: dict) -> dict:
    template = {"active": macsec.get("active"), "window_size": macsec.get("window_size")}
    for key in ("primary_cak", "fallback_cak"):
        if macsec.get(key):
            template[key] = {"crn": macsec[key]}
    return template


class GatewayRunner(CrudRunner):
    """
    Manages a Direct Link gateway.

    Connect gateways are provisioned asynchronously; after creating one the
    runner polls `operational_status` until it becomes terminal, unless the
    port belongs to a provider that provisions on its side. Pass `clock` and
    `sleep` to control the polling time source.
    """

    def __init__(self, module, context, client, clock=time.monotonic, sleep=time.sleep):
        super().__init__(module, context, client)
        self.clock = clock
        self.sleep = sleep

    def validate(self):
        name = self.params.get("name")
        if name is not None and (
            len(name) > GATEWAY_NAME_MAX_LENGTH or not GATEWAY_NAME_PATTERN.match(name)
        ):
            raise ParameterError(
                f"Gateway name '{name}' must be 1 to {GATEWAY_NAME_MAX_LENGTH} characters, "
                "start with a letter, end with a letter or digit and contain only "
                "letters, digits, '-' and '_'."
            )

        for param, (low, high) in (
            ("bfd_interval", BFD_INTERVAL_RANGE),
            ("bfd_multiplier", BFD_MULTIPLIER_RANGE),
        ):
            value = self.params.get(param)
            if value is not None and not low <= value <= high:
                raise ParameterError(f"'{param}' must be between {low} and {high}.")

        if self.params.get("state", "present") != "present":
            return

        gateway_type = self.params.get("type")
        if gateway_type == GatewayType.DEDICATED.value:
            missing = [p for p in DEDICATED_ONLY_PARAMS if not self.params.get(p)]
            if missing:
                raise ParameterError(
                    f"A dedicated gateway requires {', '.join(missing)}."
                )
            if self.params.get("port"):
                raise ParameterError("'port' can only be set on connect gateways.")
        elif gateway_type == GatewayType.CONNECT.value:
            if not self.params.get("port"):
                raise ParameterError("A connect gateway requires 'port'.")
            if self.params.get("macsec_config"):
                raise ParameterError(
                    "'macsec_config' can only be set on dedicated gateways."
                )

    def list_items(self, body) -> list:
        return (body or {}).get("gateways") or []

    def decode(self, payload):
        return decode_record(Gateway, payload)

    def flatten(self, record) -> dict:
        return flatten_gateway(record)

    def bfd_template(self) -> dict | None:
        interval = self.params.get("bfd_interval")
        multiplier = self.params.get("bfd_multiplier")
        if interval is None and multiplier is None:
            return None
        if interval is not None and multiplier is None:
            multiplier = DEFAULT_BFD_MULTIPLIER
        return {"interval": interval, "multiplier": multiplier}

    def build_create_request(self) -> dict:
        values = {key: self.params.get(key) for key in TEMPLATE_PARAMS}
        if self.params.get("resource_group"):
            values["resource_group"] = {"id": self.params["resource_group"]}
        if self.params.get("authentication_key"):
            values["authentication_key"] = {"crn": self.params["authentication_key"]}
        if self.params.get("port"):
            values["port"] = {"id": self.params["port"]}
        values["bfd_config"] = self.bfd_template()
        if self.params.get("macsec_config"):
            values["macsec_config"] = _macsec_template(self.params["macsec_config"])

        template = GATEWAY_TEMPLATE_FAMILY.decode(values)
        missing = missing_fields(template)
        if missing:
            raise ParameterError(
                f"Creating a {self.params['type']} gateway requires {', '.join(missing)}."
            )
        return GATEWAY_TEMPLATE_FAMILY.encode_payload(template)

    def desired_state(self) -> dict:
        desired = dict(self.params)
        if desired.get("bfd_interval") is not None and desired.get("bfd_multiplier") is None:
            desired["bfd_multiplier"] = DEFAULT_BFD_MULTIPLIER
        macsec = desired.get("macsec_config")
        if macsec:
            desired["macsec_config"] = {
                key: value for key, value in macsec.items() if value is not None
            }
        return desired

    def current_state(self) -> dict:
        if not self.resource:
            return {}
        current = dict(self.resource)
        desired_macsec = self.desired_state().get("macsec_config")
        if desired_macsec and current.get("macsec_config"):
            current["macsec_config"] = {
                key: current["macsec_config"].get(key)
                for key in desired_macsec
                if key in current["macsec_config"]
            }
        return current

    def build_update_request(self, changes: list) -> dict:
        patch = {}
        bfd = {}
        for change in changes:
            param, value = change["param"], change["new"]
            if param == "authentication_key":
                patch[param] = {"crn": value}
            elif param in ("bfd_interval", "bfd_multiplier"):
                bfd[param[len("bfd_"):]] = value
            elif param == "macsec_config":
                old = change["old"] or {}
                macsec = {}
                for key, new in value.items():
                    if old.get(key) == new:
                        continue
                    macsec[key] = {"crn": new} if key.endswith("_cak") else new
                patch[param] = macsec
            else:
                patch[param] = value
        if bfd:
            patch["bfd_config"] = bfd
        return patch

    def refresh_gateway(self, identifier: str) -> dict:
        body, _ = self.client.send_request(
            "GET",
            self.context["read_path"],
            path_params={"id": identifier},
            operation="Refresh gateway status",
            identifier=identifier,
        )
        return body

    def port_provider(self, port_id: str) -> str:
        body, _ = self.client.send_request(
            "GET",
            self.context["port_path"],
            path_params={"id": port_id},
            operation="Read port",
            identifier=port_id,
        )
        port = decode_record(Port, body or {})
        return (port.provider_name or "").lower()

    def needs_waiting(self, response) -> bool:
        if not self.params.get("wait", True):
            return False
        if response.get("type") != GatewayType.CONNECT.value:
            return False
        port_id = (response.get("port") or {}).get("id") or self.params.get("port")
        provider = self.port_provider(port_id)
        return not any(name in provider for name in SELF_PROVISIONING_PROVIDERS)

    def after_create(self, response):
        if not self.needs_waiting(response):
            return
        poller = StatusPoller(
            refresh=self.refresh_gateway,
            terminal_states=GATEWAY_TERMINAL_STATES,
            timeout=self.params.get("timeout", 3600),
            interval=self.params.get("interval", 10),
            status_field="operational_status",
            clock=self.clock,
            sleep=self.sleep,
        )
        result = poller.wait(self.identifier)
        if not result.succeeded:
            raise ProvisioningFailed(
                self.identifier,
                result.status,
                self.flatten(self.decode(result.resource)),
            )


DEFINITION = ResourceDefinition(
    name="ibm_dl_gateway",
    kind="crud",
    short_description="Manage Direct Link gateways.",
    description=(
        "Orders dedicated and connect Direct Link gateways. After a connect gateway "
        "is created the module waits until it is provisioned, unless `wait` is false "
        "or the port's provider provisions it on its side."
    ),
    runner=GatewayRunner,
    api_version="2023-12-13",
    context={
        "resource_type": "gateway",
        "list_path": "/gateways",
        "create_path": "/gateways",
        "read_path": "/gateways/{id}",
        "update_path": "/gateways/{id}",
        "delete_path": "/gateways/{id}",
        "port_path": "/ports/{id}",
        "update_method": "PATCH",
        "update_fields": [
            "name",
            "speed_mbps",
            "bgp_asn",
            "bgp_cer_cidr",
            "bgp_ibm_cidr",
            "global",
            "metered",
            "authentication_key",
            "connection_mode",
            "bfd_interval",
            "bfd_multiplier",
            "macsec_config",
        ],
        "force_new_fields": [
            "type",
            "port",
            "location_name",
            "cross_connect_router",
            "carrier_name",
            "customer_name",
            "resource_group",
            "bgp_base_cidr",
        ],
    },
    parameters={
        **AUTH_OPTIONS,
        **STATE_OPTIONS,
        **WAITER_OPTIONS,
        "name": {
            "description": "The unique user-defined name for this gateway.",
            "type": "str",
            "required": True,
        },
        "type": {
            "description": "Offering type.",
            "type": "str",
            "choices": [member.value for member in GatewayType],
        },
        "speed_mbps": {"description": "Gateway speed in megabits per second.", "type": "int"},
        "global": {
            "description": "Gateways with global routing can connect to networks outside their associated region.",
            "type": "bool",
        },
        "bgp_asn": {"description": "BGP ASN.", "type": "int"},
        "metered": {"description": "Metered billing option.", "type": "bool"},
        "bgp_base_cidr": {"description": "BGP base CIDR.", "type": "str"},
        "bgp_cer_cidr": {"description": "BGP customer edge router CIDR.", "type": "str"},
        "bgp_ibm_cidr": {"description": "BGP IBM CIDR.", "type": "str"},
        "resource_group": {"description": "Resource group ID for this gateway.", "type": "str"},
        "authentication_key": {
            "description": "BGP MD5 authentication key CRN.",
            "type": "str",
            "no_log": False,
        },
        "connection_mode": {
            "description": "Type of network connection that you want to bind to your direct link.",
            "type": "str",
            "choices": CONNECTION_MODES,
        },
        "bfd_interval": {
            "description": "BFD minimum interval in milliseconds (300-255000).",
            "type": "int",
        },
        "bfd_multiplier": {
            "description": "BFD multiplier (1-255). Defaults to 3 when only `bfd_interval` is set.",
            "type": "int",
        },
        "carrier_name": {"description": "Carrier name. Dedicated gateways only.", "type": "str"},
        "cross_connect_router": {
            "description": "Cross connect router. Dedicated gateways only.",
            "type": "str",
        },
        "customer_name": {"description": "Customer name. Dedicated gateways only.", "type": "str"},
        "location_name": {
            "description": "Gateway location. Dedicated gateways only.",
            "type": "str",
        },
        "port": {"description": "Port identifier. Connect gateways only.", "type": "str"},
        "macsec_config": {
            "description": "MACsec configuration. Dedicated gateways only.",
            "type": "dict",
            "options": {
                "active": {
                    "description": "Indicate whether MACsec protection should be active (true) or inactive (false).",
                    "type": "bool",
                    "required": True,
                },
                "primary_cak": {
                    "description": "CRN of the desired primary connectivity association key.",
                    "type": "str",
                    "required": True,
                },
                "fallback_cak": {
                    "description": "CRN of the desired fallback connectivity association key.",
                    "type": "str",
                },
                "window_size": {
                    "description": "Replay protection window size.",
                    "type": "int",
                },
            },
        },
    },
    required_if=[["state", "present", ["type", "speed_mbps", "global", "bgp_asn", "metered"]]],
    examples=[
        {
            "name": "Order a connect gateway and wait until it is provisioned",
            "params": {
                "name": "prod-gateway",
                "type": "connect",
                "speed_mbps": 1000,
                "global": True,
                "bgp_asn": 64999,
                "metered": False,
                "port": "9cbf7e6e-7a21-4a91-9d5e-1f6c0f6a35b4",
                "bfd_interval": 2000,
            },
        },
        {
            "name": "Order a dedicated gateway",
            "params": {
                "name": "dal-dedicated",
                "type": "dedicated",
                "speed_mbps": 10000,
                "global": False,
                "bgp_asn": 64999,
                "metered": True,
                "carrier_name": "my carrier",
                "cross_connect_router": "LAB-xcr01.dal09",
                "customer_name": "my customer",
                "location_name": "dal09",
            },
        },
    ],
)
