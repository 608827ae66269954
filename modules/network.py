from typing import Optional
from attr import dataclass, field
import re

from pulumi import ComponentResource, ResourceOptions
from pulumi_azure_native import (
    network as az_network,
    resources as az_resources,
)

MIN_RULE_PRIORITY = 100
MAX_RULE_PRIORITY = 4096
PORT_RANGE_PATTERN = re.compile(r"^(\d{1,5})(?:-(\d{1,5}))?$")
PORTLESS_PROTOCOLS = ("Icmp", "Esp", "Ah")


def _check_port_range(port_range: str) -> None:
    if port_range == "*":
        return
    match = PORT_RANGE_PATTERN.match(port_range)
    if not match:
        raise ValueError(f"Invalid port range '{port_range}'")
    low = int(match.group(1))
    high = int(match.group(2) or low)
    if low > high or high > 65535:
        raise ValueError(f"Invalid port range '{port_range}'")


@dataclass
class SecurityRuleSpecs:
    name: str
    priority: int
    destination_port_range: str
    description: Optional[str] = None
    protocol: str = "Tcp"
    access: str = "Allow"
    direction: str = "Inbound"
    source_address_prefixes: list[str] = field(factory=lambda: ["0.0.0.0/0"])
    source_port_range: str = "*"
    destination_address_prefix: str = "*"

    def __attrs_post_init__(self):
        if not MIN_RULE_PRIORITY <= self.priority <= MAX_RULE_PRIORITY:
            raise ValueError(
                f"Rule '{self.name}' priority {self.priority} is outside {MIN_RULE_PRIORITY}-{MAX_RULE_PRIORITY}"  # noqa: E501
            )
        _check_port_range(self.destination_port_range)
        _check_port_range(self.source_port_range)
        if self.protocol in PORTLESS_PROTOCOLS and (
            self.destination_port_range != "*" or self.source_port_range != "*"
        ):
            raise ValueError(
                f"Rule '{self.name}' uses protocol {self.protocol} which does not take port ranges"  # noqa: E501
            )
        if not self.source_address_prefixes:
            raise ValueError(f"Rule '{self.name}' has no source address prefixes")

    def to_args(self) -> az_network.SecurityRuleArgs:
        return az_network.SecurityRuleArgs(
            name=self.name,
            description=self.description,
            access=self.access,
            direction=self.direction,
            priority=self.priority,
            protocol=self.protocol,
            source_address_prefixes=self.source_address_prefixes,
            source_port_range=self.source_port_range,
            destination_address_prefix=self.destination_address_prefix,
            destination_port_range=self.destination_port_range,
        )


@dataclass
class NetworkSpecs:
    vnet_address_prefixes: list[str]
    subnet_address_prefixes: list[str]
    security_rules: list[SecurityRuleSpecs] = field(factory=list)


def validate_security_rules(rules: list[SecurityRuleSpecs]) -> None:
    """
    Raises ValueError when two rules share a name, or share a priority in
    the same direction.
    """
    names = set()
    priorities: dict[tuple[str, int], str] = {}
    for rule in rules:
        if rule.name in names:
            raise ValueError(f"Duplicate security rule name '{rule.name}'")
        names.add(rule.name)

        key = (rule.direction.lower(), rule.priority)
        if key in priorities:
            raise ValueError(
                f"Rules '{priorities[key]}' and '{rule.name}' share {rule.direction} priority {rule.priority}"  # noqa: E501
            )
        priorities[key] = rule.name


def web_server_security_rules(
    http_port: int,
    ssh_port: int,
    source_address_prefixes: Optional[list[str]] = None,
    ssh_source_address_prefixes: Optional[list[str]] = None,
) -> list[SecurityRuleSpecs]:
    """
    Inbound HTTP and SSH rules for a single web server.
    """
    source_address_prefixes = source_address_prefixes or ["0.0.0.0/0"]
    return [
        SecurityRuleSpecs(
            name="allow-http-inbound",
            description="Allow HTTP inbound",
            priority=100,
            destination_port_range=str(http_port),
            source_address_prefixes=list(source_address_prefixes),
        ),
        SecurityRuleSpecs(
            name="allow-ssh-inbound",
            description="Allow SSH inbound",
            priority=110,
            destination_port_range=str(ssh_port),
            source_address_prefixes=list(
                ssh_source_address_prefixes or source_address_prefixes
            ),
        ),
    ]


class Network(ComponentResource):
    """
    Create a Virtual Network with a single NSG-guarded subnet.
    """

    def __init__(
        self,
        name: str,
        network_spec: NetworkSpecs,
        resource_group: az_resources.ResourceGroup,
        location: str,
        tags: Optional[dict] = None,
        opts: Optional[ResourceOptions] = None,
    ):
        validate_security_rules(network_spec.security_rules)

        super().__init__("azwebserver:network:Network", name, None, opts)

        self.opts = ResourceOptions.merge(opts, ResourceOptions(parent=self))

        self.virtual_network = az_network.VirtualNetwork(
            f"{name}-vnet",
            resource_group_name=resource_group.name,
            address_space=az_network.AddressSpaceArgs(
                address_prefixes=network_spec.vnet_address_prefixes,
            ),
            location=location,
            tags=tags,
            opts=self.opts,
        )

        self.network_security_group = az_network.NetworkSecurityGroup(
            f"{name}-nsg",
            resource_group_name=resource_group.name,
            location=location,
            security_rules=[
                rule.to_args() for rule in network_spec.security_rules
            ],
            tags=tags,
            opts=ResourceOptions.merge(
                self.opts, ResourceOptions(depends_on=[resource_group])
            ),
        )

        self.subnet = az_network.Subnet(
            f"{name}-subnet",
            address_prefixes=network_spec.subnet_address_prefixes,
            network_security_group=az_network.NetworkSecurityGroupArgs(
                id=self.network_security_group.id,
            ),
            resource_group_name=resource_group.name,
            virtual_network_name=self.virtual_network.name,
            opts=ResourceOptions(parent=self.virtual_network),
        )

        self.register_outputs(
            {
                "virtual_network_id": self.virtual_network.id,
                "subnet_id": self.subnet.id,
            }
        )
