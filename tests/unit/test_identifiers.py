import pytest

from ansible_ibm_provider.errors import InvalidIdentifier
from ansible_ibm_provider.identifiers import join_identifier, split_identifier


def test_join_and_split():
    identifier = join_identifier("public_cert", "certificate_authorities", "my-ca")
    assert identifier == "public_cert/certificate_authorities/my-ca"
    assert split_identifier(identifier, 3) == [
        "public_cert",
        "certificate_authorities",
        "my-ca",
    ]


@pytest.mark.parametrize(
    "value, count",
    [
        ("arbitrary/1234/extra", 2),
        ("arbitrary", 2),
        ("arbitrary/", 2),
        ("/1234", 2),
        ("", 1),
        (None, 2),
    ],
)
def test_split_rejects_malformed_identifiers(value, count):
    with pytest.raises(InvalidIdentifier) as excinfo:
        split_identifier(value, count)
    assert excinfo.value.expected_segments == count


@pytest.mark.parametrize("segments", [("arbitrary", ""), ("a/b", "c")])
def test_join_rejects_bad_segments(segments):
    with pytest.raises(InvalidIdentifier):
        join_identifier(*segments)
