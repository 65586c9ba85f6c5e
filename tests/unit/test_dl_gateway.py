import pytest

from ansible_ibm_provider.resources.dl_gateway import DEFINITION, GatewayRunner

GATEWAY = {
    "id": "gw-1",
    "name": "prod-gateway",
    "crn": "crn:v1:bluemix:public:directlink:dal03:a/1234::dedicated:gw-1",
    "type": "connect",
    "speed_mbps": 1000,
    "global": True,
    "bgp_asn": 64999,
    "bgp_ibm_asn": 13884,
    "metered": False,
    "operational_status": "provisioned",
    "created_at": "2024-03-01T10:00:00.000Z",
    "port": {"id": "p1"},
    "resource_group": {"id": "rg-1"},
    "bfd_config": {"interval": 2000, "multiplier": 3, "bfd_status": "up"},
}


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def gateway_params():
    params = {name: None for name in DEFINITION.parameters}
    params.update(
        {
            "api_url": "https://api.example.com",
            "iam_token": "test-token",
            "state": "present",
            "wait": True,
            "timeout": 60,
            "interval": 10,
            "name": "prod-gateway",
            "type": "connect",
            "speed_mbps": 1000,
            "global": True,
            "bgp_asn": 64999,
            "metered": False,
            "port": "p1",
            "bfd_interval": 2000,
        }
    )
    return params


@pytest.fixture
def clock():
    return FakeClock()


def make_runner(module, client, clock):
    return GatewayRunner(module, DEFINITION.context, client, clock=clock, sleep=clock.sleep)


def with_status(status):
    return {**GATEWAY, "operational_status": status}


class TestGatewayCreate:
    def test_connect_gateway_waits_until_provisioned(
        self, mock_ansible_module, mock_client, gateway_params, clock
    ):
        mock_ansible_module.params = gateway_params
        mock_client.send_request.side_effect = [
            ({"gateways": []}, 200),  # Lookup by name
            (with_status("configuring"), 201),  # Create
            ({"id": "p1", "provider_name": "Equinix"}, 200),  # Port
            (with_status("configuring"), 200),  # Poll
            (with_status("provisioned"), 200),  # Poll
            (GATEWAY, 200),  # Read back
        ]

        make_runner(mock_ansible_module, mock_client, clock).run()

        mock_ansible_module.fail_json.assert_not_called()
        create_call = mock_client.send_request.call_args_list[1]
        assert create_call.args == ("POST", "/gateways")
        assert create_call.kwargs["data"] == {
            "name": "prod-gateway",
            "type": "connect",
            "speed_mbps": 1000,
            "global": True,
            "bgp_asn": 64999,
            "metered": False,
            "bfd_config": {"interval": 2000, "multiplier": 3},
            "port": {"id": "p1"},
        }
        assert clock.sleeps == [10]

        kwargs = mock_ansible_module.exit_json.call_args.kwargs
        assert kwargs["changed"] is True
        assert kwargs["id"] == "gw-1"
        resource = kwargs["resource"]
        assert resource["port"] == "p1"
        assert resource["resource_group"] == "rg-1"
        assert resource["bfd_interval"] == 2000
        assert resource["bfd_multiplier"] == 3
        assert resource["bfd_status"] == "up"
        assert resource["created_at"] == "2024-03-01T10:00:00Z"

    @pytest.mark.parametrize("provider", ["NetBond", "Megaport Inc"])
    def test_self_provisioning_providers_are_not_polled(
        self, mock_ansible_module, mock_client, gateway_params, clock, provider
    ):
        mock_ansible_module.params = gateway_params
        mock_client.send_request.side_effect = [
            ({"gateways": []}, 200),
            (with_status("configuring"), 201),
            ({"id": "p1", "provider_name": provider}, 200),
            (with_status("configuring"), 200),
        ]

        make_runner(mock_ansible_module, mock_client, clock).run()

        assert mock_client.send_request.call_count == 4
        assert clock.sleeps == []
        assert mock_ansible_module.exit_json.call_args.kwargs["changed"] is True

    def test_no_wait(self, mock_ansible_module, mock_client, gateway_params, clock):
        gateway_params["wait"] = False
        mock_ansible_module.params = gateway_params
        mock_client.send_request.side_effect = [
            ({"gateways": []}, 200),
            (with_status("configuring"), 201),
            (with_status("configuring"), 200),
        ]

        make_runner(mock_ansible_module, mock_client, clock).run()

        assert mock_client.send_request.call_count == 3
        assert mock_ansible_module.exit_json.call_args.kwargs["resource"]["operational_status"] == "configuring"

    def test_rejected_gateway_fails_with_resource(
        self, mock_ansible_module, mock_client, gateway_params, clock
    ):
        mock_ansible_module.params = gateway_params
        mock_client.send_request.side_effect = [
            ({"gateways": []}, 200),
            (with_status("configuring"), 201),
            ({"id": "p1", "provider_name": "Equinix"}, 200),
            (with_status("create_rejected"), 200),
        ]

        make_runner(mock_ansible_module, mock_client, clock).run()

        mock_ansible_module.exit_json.assert_not_called()
        kwargs = mock_ansible_module.fail_json.call_args.kwargs
        assert "create_rejected" in kwargs["msg"]
        assert kwargs["resource"]["operational_status"] == "create_rejected"

    def test_wait_timeout(self, mock_ansible_module, mock_client, gateway_params, clock):
        gateway_params["timeout"] = 15
        mock_ansible_module.params = gateway_params
        mock_client.send_request.side_effect = [
            ({"gateways": []}, 200),
            (with_status("configuring"), 201),
            ({"id": "p1", "provider_name": "Equinix"}, 200),
            (with_status("configuring"), 200),
            (with_status("configuring"), 200),
        ]

        make_runner(mock_ansible_module, mock_client, clock).run()

        assert "Timeout waiting 15 seconds" in mock_ansible_module.fail_json.call_args.kwargs["msg"]
        assert clock.sleeps == [10, 5]

    def test_dedicated_gateway_is_not_polled(
        self, mock_ansible_module, mock_client, gateway_params, clock
    ):
        gateway_params.update(
            {
                "type": "dedicated",
                "port": None,
                "carrier_name": "my carrier",
                "cross_connect_router": "LAB-xcr01.dal09",
                "customer_name": "my customer",
                "location_name": "dal09",
                "macsec_config": {
                    "active": True,
                    "primary_cak": "crn:v1:cak-1",
                    "fallback_cak": None,
                    "window_size": None,
                },
            }
        )
        mock_ansible_module.params = gateway_params
        dedicated = {**GATEWAY, "type": "dedicated", "port": None}
        mock_client.send_request.side_effect = [
            ({"gateways": []}, 200),
            (dedicated, 201),
            (dedicated, 200),
        ]

        make_runner(mock_ansible_module, mock_client, clock).run()

        mock_ansible_module.fail_json.assert_not_called()
        body = mock_client.send_request.call_args_list[1].kwargs["data"]
        assert body["carrier_name"] == "my carrier"
        assert body["macsec_config"] == {"active": True, "primary_cak": {"crn": "crn:v1:cak-1"}}
        assert "port" not in body


class TestGatewayValidation:
    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"name": "1gateway"}, "start with a letter"),
            ({"name": "gateway-"}, "start with a letter"),
            ({"name": "g" * 64}, "1 to 63 characters"),
            ({"bfd_interval": 100}, "'bfd_interval' must be between 300 and 255000"),
            ({"bfd_multiplier": 0}, "'bfd_multiplier' must be between 1 and 255"),
            ({"port": None}, "requires 'port'"),
            ({"macsec_config": {"active": True, "primary_cak": "crn"}}, "only be set on dedicated"),
            ({"type": "dedicated", "port": None}, "carrier_name"),
        ],
    )
    def test_invalid_parameters(
        self, mock_ansible_module, mock_client, gateway_params, clock, overrides, message
    ):
        gateway_params.update(overrides)
        mock_ansible_module.params = gateway_params

        make_runner(mock_ansible_module, mock_client, clock).run()

        mock_client.send_request.assert_not_called()
        assert message in mock_ansible_module.fail_json.call_args.kwargs["msg"]


class TestGatewayUpdate:
    def test_patch_only_changed_fields(self, mock_ansible_module, mock_client, gateway_params, clock):
        gateway_params.update({"id": "gw-1", "speed_mbps": 2000, "bfd_interval": 3000})
        mock_ansible_module.params = gateway_params
        updated = {**GATEWAY, "speed_mbps": 2000, "bfd_config": {"interval": 3000, "multiplier": 3}}
        mock_client.send_request.side_effect = [(GATEWAY, 200), (updated, 200), (updated, 200)]

        make_runner(mock_ansible_module, mock_client, clock).run()

        update_call = mock_client.send_request.call_args_list[1]
        assert update_call.args == ("PATCH", "/gateways/{id}")
        assert update_call.kwargs["path_params"] == {"id": "gw-1"}
        assert update_call.kwargs["data"] == {"speed_mbps": 2000, "bfd_config": {"interval": 3000}}
        assert mock_ansible_module.exit_json.call_args.kwargs["changed"] is True

    def test_port_change_requires_new_gateway(
        self, mock_ansible_module, mock_client, gateway_params, clock
    ):
        gateway_params.update({"id": "gw-1", "port": "p2"})
        mock_ansible_module.params = gateway_params
        mock_client.send_request.return_value = (GATEWAY, 200)

        make_runner(mock_ansible_module, mock_client, clock).run()

        assert "'port'" in mock_ansible_module.fail_json.call_args.kwargs["msg"]

    def test_found_by_name_without_changes(
        self, mock_ansible_module, mock_client, gateway_params, clock
    ):
        mock_ansible_module.params = gateway_params
        mock_client.send_request.return_value = ({"gateways": [GATEWAY]}, 200)

        make_runner(mock_ansible_module, mock_client, clock).run()

        kwargs = mock_ansible_module.exit_json.call_args.kwargs
        assert kwargs["changed"] is False
        assert kwargs["id"] == "gw-1"
