import ipaddress
from typing import Optional
from attr import dataclass, field

from pulumi import ComponentResource, Output, ResourceOptions
from pulumi_azure_native import network as az_network

from utils.module_dataclasses import EnvironmentSpecs

# Azure only deploys a bastion into a subnet with exactly this name
BASTION_SUBNET_NAME = "AzureBastionSubnet"
# Developer SKU binds to the vnet directly and takes no subnet or public IP
BASTION_SKUS = ("Basic", "Standard", "Premium")


@dataclass
class BastionSpecs:
    address_prefixes: list[str] = field(factory=lambda: ["10.0.2.0/26"])
    sku: str = "Basic"

    def __attrs_post_init__(self):
        if self.sku not in BASTION_SKUS:
            raise ValueError(
                f"Unsupported bastion sku '{self.sku}', expected one of {', '.join(BASTION_SKUS)}"  # noqa: E501
            )
        for prefix in self.address_prefixes:
            try:
                prefix_length = ipaddress.ip_network(prefix, strict=False).prefixlen
            except ValueError:
                raise ValueError(
                    f"Bastion subnet prefix '{prefix}' is not a valid CIDR block"
                )
            # Bastion needs at least a /26
            if prefix_length > 26:
                raise ValueError(
                    f"Bastion subnet prefix '{prefix}' is smaller than /26"
                )


class Bastion(ComponentResource):
    """
    Create an Azure Bastion host in the stack's virtual network.
    """

    def __init__(
        self,
        name: str,
        bastion_spec: BastionSpecs,
        env_spec: EnvironmentSpecs,
        opts: Optional[ResourceOptions] = None,
    ):
        super().__init__("azwebserver:network:Bastion", name, None, opts)

        self.opts = ResourceOptions.merge(opts, ResourceOptions(parent=self))

        self.subnet = az_network.Subnet(
            f"{name}-subnet",
            subnet_name=BASTION_SUBNET_NAME,
            address_prefixes=bastion_spec.address_prefixes,
            resource_group_name=env_spec.resource_group.name,
            virtual_network_name=env_spec.vnet.name,
            # subnets of one vnet cannot be updated concurrently
            opts=ResourceOptions.merge(
                self.opts, ResourceOptions(depends_on=[env_spec.subnet])
            ),
        )

        self.public_ip = az_network.PublicIPAddress(
            f"{name}-public-ip",
            resource_group_name=env_spec.resource_group.name,
            public_ip_allocation_method=az_network.IPAllocationMethod.STATIC,
            sku=az_network.PublicIPAddressSkuArgs(
                name=az_network.PublicIPAddressSkuName.STANDARD,
            ),
            opts=self.opts,
            tags=env_spec.tags,
        )

        self.bastion_host = az_network.BastionHost(
            f"{name}-host",
            resource_group_name=env_spec.resource_group.name,
            ip_configurations=[
                az_network.BastionHostIPConfigurationArgs(
                    name=f"{name}-ipconfig",
                    subnet=az_network.SubResourceArgs(id=self.subnet.id),
                    public_ip_address=az_network.SubResourceArgs(
                        id=self.public_ip.id,
                    ),
                )
            ],
            sku=az_network.SkuArgs(name=bastion_spec.sku),
            opts=self.opts,
            tags=env_spec.tags,
        )

        self.bastion_host_name: Output[str] = self.bastion_host.name

        self.register_outputs({"bastion_host_name": self.bastion_host_name})
