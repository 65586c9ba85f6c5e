"""
Certificate configuration shapes.

Configurations live under `/api/v1/config/{secret_type}/{config_element}` and
are selected by their `type`. Each `config_element` only admits a subset of
the types, see `ALLOWED_CONFIG_TYPES`.
"""

from enum import Enum

from ansible_ibm_provider.marshal.family import VariantFamily
from ansible_ibm_provider.marshal.fields import (
    boolean,
    build_model,
    duration,
    integer,
    json_value,
    string,
    string_list,
    timestamp,
)


class ConfigSecretType(str, Enum):
    PUBLIC_CERT = "public_cert"
    PRIVATE_CERT = "private_cert"


class ConfigElement(str, Enum):
    CERTIFICATE_AUTHORITIES = "certificate_authorities"
    DNS_PROVIDERS = "dns_providers"
    ROOT_CERTIFICATE_AUTHORITIES = "root_certificate_authorities"
    INTERMEDIATE_CERTIFICATE_AUTHORITIES = "intermediate_certificate_authorities"
    CERTIFICATE_TEMPLATES = "certificate_templates"


class ConfigType(str, Enum):
    LETSENCRYPT = "letsencrypt"
    LETSENCRYPT_STAGE = "letsencrypt-stage"
    CIS = "cis"
    CLASSIC_INFRASTRUCTURE = "classic_infrastructure"
    ROOT_CERTIFICATE_AUTHORITY = "root_certificate_authority"
    INTERMEDIATE_CERTIFICATE_AUTHORITY = "intermediate_certificate_authority"
    CERTIFICATE_TEMPLATE = "certificate_template"


ALLOWED_CONFIG_TYPES = {
    ConfigElement.CERTIFICATE_AUTHORITIES: [
        ConfigType.LETSENCRYPT,
        ConfigType.LETSENCRYPT_STAGE,
    ],
    ConfigElement.DNS_PROVIDERS: [
        ConfigType.CIS,
        ConfigType.CLASSIC_INFRASTRUCTURE,
    ],
    ConfigElement.ROOT_CERTIFICATE_AUTHORITIES: [
        ConfigType.ROOT_CERTIFICATE_AUTHORITY,
    ],
    ConfigElement.INTERMEDIATE_CERTIFICATE_AUTHORITIES: [
        ConfigType.INTERMEDIATE_CERTIFICATE_AUTHORITY,
    ],
    ConfigElement.CERTIFICATE_TEMPLATES: [
        ConfigType.CERTIFICATE_TEMPLATE,
    ],
}

# Private CA elements only exist for private certificates, the others only
# for public ones.
ELEMENT_SECRET_TYPES = {
    ConfigElement.CERTIFICATE_AUTHORITIES: ConfigSecretType.PUBLIC_CERT,
    ConfigElement.DNS_PROVIDERS: ConfigSecretType.PUBLIC_CERT,
    ConfigElement.ROOT_CERTIFICATE_AUTHORITIES: ConfigSecretType.PRIVATE_CERT,
    ConfigElement.INTERMEDIATE_CERTIFICATE_AUTHORITIES: ConfigSecretType.PRIVATE_CERT,
    ConfigElement.CERTIFICATE_TEMPLATES: ConfigSecretType.PRIVATE_CERT,
}

# Every configuration variant starts with these two fields. Everything after
# them travels inside the `config` object of the request body.
HEADER_FIELDS = [
    string("name", required=True),
    string("type", required=True),
]

LETSENCRYPT_FIELDS = [
    string("private_key", required=True),
]

LetsEncryptConfig = build_model("LetsEncryptConfig", HEADER_FIELDS + LETSENCRYPT_FIELDS)

# Same shape as LetsEncryptConfig; a distinct class keeps the staging
# environment distinguishable by type.
LetsEncryptStageConfig = build_model(
    "LetsEncryptStageConfig", HEADER_FIELDS + LETSENCRYPT_FIELDS
)

CISConfig = build_model(
    "CISConfig",
    HEADER_FIELDS
    + [
        string("cis_crn", required=True),
        string("cis_apikey"),
    ],
)

ClassicInfrastructureConfig = build_model(
    "ClassicInfrastructureConfig",
    HEADER_FIELDS
    + [
        string("classic_infrastructure_username", required=True),
        string("classic_infrastructure_password", required=True),
    ],
)

# Credentials the service accepts but never returns.
WRITE_ONLY_CONFIG_FIELDS = frozenset(
    ["private_key", "cis_apikey", "classic_infrastructure_password"]
)

# Subject fields of an issued CA or certificate.
SUBJECT_FIELDS = [
    string_list("ou"),
    string_list("organization"),
    string_list("country"),
    string_list("locality"),
    string_list("province"),
    string_list("street_address"),
    string_list("postal_code"),
    string("serial_number"),
]

CA_FIELDS = [
    duration("max_ttl", required=True),
    duration("crl_expiry"),
    boolean("crl_disable"),
    boolean("crl_distribution_points_encoded"),
    boolean("issuing_certificates_urls_encoded"),
    string("common_name", required=True),
    string("status"),
    timestamp("expiration_date"),
    string("alt_names"),
    string("ip_sans"),
    string("uri_sans"),
    string_list("other_sans"),
    string("format"),
    string("private_key_format"),
    string("key_type"),
    integer("key_bits"),
    boolean("exclude_cn_from_sans"),
]

RootCAConfig = build_model(
    "RootCAConfig",
    HEADER_FIELDS
    + CA_FIELDS
    + [
        duration("ttl"),
        integer("max_path_length"),
        string_list("permitted_dns_domains"),
    ]
    + SUBJECT_FIELDS
    + [json_value("data")],
)

IntermediateCAConfig = build_model(
    "IntermediateCAConfig",
    HEADER_FIELDS
    + CA_FIELDS
    + [
        string("signing_method", required=True),
        string("issuer"),
    ]
    + SUBJECT_FIELDS
    + [json_value("data")],
)

CertificateTemplateConfig = build_model(
    "CertificateTemplateConfig",
    HEADER_FIELDS
    + [
        string("certificate_authority", required=True),
        string("allowed_secret_groups"),
        duration("max_ttl"),
        duration("ttl"),
        boolean("allow_localhost"),
        string_list("allowed_domains"),
        boolean("allowed_domains_template"),
        boolean("allow_bare_domains"),
        boolean("allow_subdomains"),
        boolean("allow_glob_domains"),
        boolean("allow_any_name"),
        boolean("enforce_hostnames"),
        boolean("allow_ip_sans"),
        string_list("allowed_uri_sans"),
        string_list("allowed_other_sans"),
        boolean("server_flag"),
        boolean("client_flag"),
        boolean("code_signing_flag"),
        boolean("email_protection_flag"),
        string("key_type"),
        integer("key_bits"),
        string_list("key_usage"),
        string_list("ext_key_usage"),
        string_list("ext_key_usage_oids"),
        boolean("use_csr_common_name"),
        boolean("use_csr_sans"),
        boolean("require_cn"),
        string_list("policy_identifiers"),
        boolean("basic_constraints_valid_for_non_ca"),
        duration("not_before_duration"),
    ]
    + SUBJECT_FIELDS,
)

CERT_CONFIG_FAMILY = VariantFamily(
    "certificate configuration",
    "type",
    ConfigType,
    [
        (ConfigType.LETSENCRYPT, LetsEncryptConfig),
        (ConfigType.LETSENCRYPT_STAGE, LetsEncryptStageConfig),
        (ConfigType.CIS, CISConfig),
        (ConfigType.CLASSIC_INFRASTRUCTURE, ClassicInfrastructureConfig),
        (ConfigType.ROOT_CERTIFICATE_AUTHORITY, RootCAConfig),
        (ConfigType.INTERMEDIATE_CERTIFICATE_AUTHORITY, IntermediateCAConfig),
        (ConfigType.CERTIFICATE_TEMPLATE, CertificateTemplateConfig),
    ],
)

# Output-only fields reported by the service for CAs.
CONFIG_READ_ONLY_FIELDS = {"status", "expiration_date", "data"}


def config_body(mapping: dict) -> dict:
    """
    Splits an encoded configuration into the request body shape:
    `{"name": ..., "type": ..., "config": {...}}`.
    """
    header = {key: mapping[key] for key in ("name", "type") if key in mapping}
    config = {
        key: value
        for key, value in mapping.items()
        if key not in header and key not in CONFIG_READ_ONLY_FIELDS
    }
    return {**header, "config": config}


def flatten_config(payload: dict) -> dict:
    """The inverse of `config_body`: lifts `config` next to `name` and `type`."""
    flat = {key: value for key, value in payload.items() if key != "config"}
    flat.update(payload.get("config") or {})
    return flat
