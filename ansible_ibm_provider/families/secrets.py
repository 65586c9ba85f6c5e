"""
Secrets Manager secret shapes.

A secret resource has seven shapes selected by `secret_type`. Every variant
carries the common metadata fields followed by its own type-specific fields.
"""

from enum import Enum

from ansible_ibm_provider.marshal.family import VariantFamily
from ansible_ibm_provider.marshal.fields import (
    boolean,
    build_model,
    duration,
    integer,
    json_value,
    nested,
    string,
    string_list,
    timestamp,
)


class SecretType(str, Enum):
    ARBITRARY = "arbitrary"
    USERNAME_PASSWORD = "username_password"
    IAM_CREDENTIALS = "iam_credentials"
    IMPORTED_CERT = "imported_cert"
    PUBLIC_CERT = "public_cert"
    PRIVATE_CERT = "private_cert"
    KV = "kv"


CertificateValidity = build_model(
    "CertificateValidity",
    [
        timestamp("not_before"),
        timestamp("not_after"),
    ],
)

Rotation = build_model(
    "Rotation",
    [
        boolean("auto_rotate"),
        boolean("rotate_keys"),
        integer("interval"),
        string("unit", description="Either `day` or `month`."),
    ],
)

IssuanceInfo = build_model(
    "IssuanceInfo",
    [
        timestamp("ordered_on"),
        string("error_code"),
        string("error_message"),
        boolean("bundle_certs"),
        integer("state"),
        string("state_description"),
        boolean("auto_rotated"),
        string("ca"),
        string("dns"),
    ],
)

# Metadata every secret carries regardless of its type.
COMMON_FIELDS = [
    string("id"),
    string("name", required=True),
    string("description"),
    string("secret_group_id"),
    string_list("labels"),
    integer("state"),
    string("state_description"),
    string("secret_type"),
    string("crn"),
    timestamp("creation_date"),
    string("created_by"),
    timestamp("last_update_date"),
    integer("versions_total"),
    json_value("versions"),
]

# Certificate fields shared by imported, public and private certificates.
CERTIFICATE_FIELDS = [
    string("common_name"),
    string_list("alt_names"),
    string("algorithm"),
    string("key_algorithm"),
    string("issuer"),
    string("serial_number"),
    nested("validity", CertificateValidity),
    boolean("intermediate_included"),
    boolean("private_key_included"),
    timestamp("expiration_date"),
    json_value("secret_data"),
]

ArbitrarySecret = build_model(
    "ArbitrarySecret",
    COMMON_FIELDS
    + [
        timestamp("expiration_date"),
        string("payload"),
        json_value("secret_data"),
    ],
)

UsernamePasswordSecret = build_model(
    "UsernamePasswordSecret",
    COMMON_FIELDS
    + [
        string("username", required=True),
        string("password", required=True),
        timestamp("expiration_date"),
        timestamp("next_rotation_date"),
        json_value("secret_data"),
    ],
)

IAMCredentialsSecret = build_model(
    "IAMCredentialsSecret",
    COMMON_FIELDS
    + [
        duration("ttl", required=True),
        string_list("access_groups"),
        string("api_key"),
        string("api_key_id"),
        string("service_id"),
        boolean("service_id_is_static"),
        boolean("reuse_api_key"),
    ],
)

ImportedCertificate = build_model(
    "ImportedCertificate",
    COMMON_FIELDS
    + [
        string("certificate", required=True),
        string("private_key"),
        string("intermediate"),
    ]
    + CERTIFICATE_FIELDS,
)

PublicCertificate = build_model(
    "PublicCertificate",
    COMMON_FIELDS
    + [
        string("ca", required=True),
        string("dns", required=True),
        boolean("bundle_certs"),
        nested("rotation", Rotation),
        nested("issuance_info", IssuanceInfo),
    ]
    + CERTIFICATE_FIELDS,
)

PrivateCertificate = build_model(
    "PrivateCertificate",
    COMMON_FIELDS
    + [
        string("certificate_template", required=True),
        string("certificate_authority"),
        string("ip_sans"),
        string("uri_sans"),
        string_list("other_sans"),
        duration("ttl"),
        string("format"),
        string("private_key_format"),
        boolean("exclude_cn_from_sans"),
        nested("rotation", Rotation),
        integer("revocation_time"),
        timestamp("revocation_time_rfc3339"),
    ]
    + CERTIFICATE_FIELDS,
)

KVSecret = build_model(
    "KVSecret",
    COMMON_FIELDS
    + [
        timestamp("expiration_date"),
        json_value("payload", required=True),
        json_value("secret_data"),
    ],
)

# Declaration order is the order `discriminate` checks an object against.
SECRET_RESOURCE_FAMILY = VariantFamily(
    "secret",
    "secret_type",
    SecretType,
    [
        (SecretType.ARBITRARY, ArbitrarySecret),
        (SecretType.USERNAME_PASSWORD, UsernamePasswordSecret),
        (SecretType.IAM_CREDENTIALS, IAMCredentialsSecret),
        (SecretType.IMPORTED_CERT, ImportedCertificate),
        (SecretType.PUBLIC_CERT, PublicCertificate),
        (SecretType.PRIVATE_CERT, PrivateCertificate),
        (SecretType.KV, KVSecret),
    ],
)

# Fields the metadata endpoint accepts on update.
SECRET_METADATA_FIELDS = ["name", "description", "labels", "expiration_date", "ttl"]

# Fields that never leave the create request body because the service
# derives them.
SECRET_READ_ONLY_FIELDS = {
    "id",
    "state",
    "state_description",
    "crn",
    "creation_date",
    "created_by",
    "last_update_date",
    "versions_total",
    "versions",
    "secret_data",
    "api_key_id",
    "service_id_is_static",
    "serial_number",
    "algorithm",
    "issuer",
    "validity",
    "intermediate_included",
    "private_key_included",
    "issuance_info",
    "revocation_time",
    "revocation_time_rfc3339",
    "next_rotation_date",
}
