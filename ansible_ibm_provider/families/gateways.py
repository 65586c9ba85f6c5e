"""
Direct Link gateway shapes.

Creation uses a template family selected by `type` (`dedicated` or `connect`).
Responses use a single `Gateway` record whose nested references are
flattened into the module's parameter shape by `flatten_gateway`.
"""

from enum import Enum

from ansible_ibm_provider.marshal.family import VariantFamily, encode_record
from ansible_ibm_provider.marshal.fields import (
    boolean,
    build_model,
    integer,
    json_value,
    nested,
    string,
    timestamp,
)


class GatewayType(str, Enum):
    DEDICATED = "dedicated"
    CONNECT = "connect"


# Values of `operational_status` while a gateway is provisioned.
STATUS_CONFIGURING = "configuring"
STATUS_PROVISIONED = "provisioned"
STATUS_FAILED = "failed"
STATUS_CREATE_REJECTED = "create_rejected"

# Port providers that provision connect gateways on their side; no waiting
# is done for them.
SELF_PROVISIONING_PROVIDERS = ("netbond", "megaport")

CONNECTION_MODES = ["direct", "transit"]

IdReference = build_model("IdReference", [string("id", required=True)])
CrnReference = build_model("CrnReference", [string("crn", required=True)])

BfdConfigTemplate = build_model(
    "BfdConfigTemplate",
    [
        integer("interval", required=True),
        integer("multiplier"),
    ],
)

MacsecConfigTemplate = build_model(
    "MacsecConfigTemplate",
    [
        boolean("active", required=True),
        nested("primary_cak", CrnReference, required=True),
        nested("fallback_cak", CrnReference),
        integer("window_size"),
    ],
)

TEMPLATE_FIELDS = [
    string("name", required=True),
    string("type", required=True),
    integer("speed_mbps", required=True),
    boolean("global", required=True),
    integer("bgp_asn", required=True),
    boolean("metered", required=True),
    string("bgp_base_cidr"),
    string("bgp_cer_cidr"),
    string("bgp_ibm_cidr"),
    string("connection_mode"),
    nested("resource_group", IdReference),
    nested("authentication_key", CrnReference),
    nested("bfd_config", BfdConfigTemplate),
]

DedicatedGatewayTemplate = build_model(
    "DedicatedGatewayTemplate",
    TEMPLATE_FIELDS
    + [
        string("carrier_name", required=True),
        string("cross_connect_router", required=True),
        string("customer_name", required=True),
        string("location_name", required=True),
        nested("macsec_config", MacsecConfigTemplate),
    ],
)

ConnectGatewayTemplate = build_model(
    "ConnectGatewayTemplate",
    TEMPLATE_FIELDS + [nested("port", IdReference, required=True)],
)

GATEWAY_TEMPLATE_FAMILY = VariantFamily(
    "gateway template",
    "type",
    GatewayType,
    [
        (GatewayType.DEDICATED, DedicatedGatewayTemplate),
        (GatewayType.CONNECT, ConnectGatewayTemplate),
    ],
)

BfdConfig = build_model(
    "BfdConfig",
    [
        integer("interval"),
        integer("multiplier"),
        string("bfd_status"),
        timestamp("bfd_status_updated_at"),
    ],
)

MacsecConfig = build_model(
    "MacsecConfig",
    [
        boolean("active"),
        nested("active_cak", CrnReference),
        nested("primary_cak", CrnReference),
        nested("fallback_cak", CrnReference),
        integer("sak_expiry_time"),
        string("security_policy"),
        integer("window_size"),
        string("cipher_suite"),
        integer("confidentiality_offset"),
        string("cryptographic_algorithm"),
        integer("key_server_priority"),
        string("status"),
    ],
)

Gateway = build_model(
    "Gateway",
    [
        string("id"),
        string("name"),
        string("crn"),
        string("type"),
        integer("speed_mbps"),
        boolean("global"),
        integer("bgp_asn"),
        string("bgp_base_cidr"),
        string("bgp_cer_cidr"),
        string("bgp_ibm_cidr"),
        integer("bgp_ibm_asn"),
        string("bgp_status"),
        boolean("metered"),
        string("carrier_name"),
        string("cross_connect_router"),
        string("customer_name"),
        string("location_name"),
        string("location_display_name"),
        string("completion_notice_reject_reason"),
        boolean("provider_api_managed"),
        string("operational_status"),
        string("link_status"),
        integer("vlan"),
        timestamp("created_at"),
        string("connection_mode"),
        nested("port", IdReference),
        nested("resource_group", IdReference),
        nested("authentication_key", CrnReference),
        nested("bfd_config", BfdConfig),
        nested("macsec_config", MacsecConfig),
        json_value("change_request"),
    ],
)

Port = build_model(
    "Port",
    [
        string("id"),
        string("label"),
        string("location_name"),
        string("provider_name"),
    ],
)


def _reference(value: dict | None, key: str):
    return value.get(key) if value else None


def flatten_gateway(gateway) -> dict:
    """
    Encodes a `Gateway` into the module's parameter shape: references become
    their plain identifier and the BFD settings move to top-level keys.
    """
    flat = encode_record(gateway, wrap_nested=False)

    for key, reference in (
        ("port", "id"),
        ("resource_group", "id"),
        ("authentication_key", "crn"),
    ):
        if key in flat:
            flat[key] = _reference(flat[key], reference)

    bfd = flat.pop("bfd_config", None)
    if bfd:
        for key in ("interval", "multiplier"):
            if key in bfd:
                flat[f"bfd_{key}"] = bfd[key]
        for key in ("bfd_status", "bfd_status_updated_at"):
            if key in bfd:
                flat[key] = bfd[key]

    macsec = flat.get("macsec_config")
    if macsec:
        for key in ("active_cak", "primary_cak", "fallback_cak"):
            if key in macsec:
                macsec[key] = _reference(macsec[key], "crn")

    change_request = flat.get("change_request")
    if isinstance(change_request, dict):
        flat["change_request"] = change_request.get("type")

    return flat
