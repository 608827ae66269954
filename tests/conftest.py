import pulumi
import pytest

PROJECT = "azure-webserver"
PUBLIC_IP = "203.0.113.10"
PRIVATE_IP = "10.0.1.4"


class WebServerMocks(pulumi.runtime.Mocks):
    """
    Records every registered resource and echoes its inputs back as outputs,
    filling in the handful of values Azure would compute.
    """

    def __init__(self):
        self.resources: list[pulumi.runtime.MockResourceArgs] = []

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        self.resources.append(args)
        outputs = dict(args.inputs)
        outputs.setdefault("name", args.name)
        if args.typ == "azure-native:network:PublicIPAddress":
            outputs["ipAddress"] = PUBLIC_IP
        elif args.typ == "azure-native:network:NetworkInterface":
            outputs["ipConfigurations"] = [
                {**ip_config, "privateIPAddress": PRIVATE_IP}
                for ip_config in args.inputs.get("ipConfigurations", [])
            ]
        elif args.typ == "random:index/randomPassword:RandomPassword":
            outputs["result"] = "Not-A-Real-Passw0rd"
        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        return {}

    def of_type(self, typ: str) -> list[pulumi.runtime.MockResourceArgs]:
        return [r for r in self.resources if r.typ == typ]

    def one(self, typ: str) -> pulumi.runtime.MockResourceArgs:
        matches = self.of_type(typ)
        assert len(matches) == 1, f"expected one {typ}, got {len(matches)}"
        return matches[0]


@pytest.fixture
def mocks():
    mocks = WebServerMocks()
    pulumi.runtime.set_mocks(mocks, project=PROJECT, stack="test", preview=False)
    return mocks
