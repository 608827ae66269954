from dataclasses import dataclass, field
from typing import Optional

from pulumi_azure_native import network, resources


@dataclass
class EnvironmentSpecs:
    """
    Dataclass to hold the shared resources a workload is placed into.
    Args:
        resource_group (resources.ResourceGroup): The resource group every
            resource of the stack is created in.
        vnet (network.VirtualNetwork): The virtual network of the stack.
        subnet (network.Subnet): The workload subnet.
        network_security_group (network.NetworkSecurityGroup): The NSG
            guarding the workload subnet and its network interfaces.
        tags (dict[str, str], optional): Tags to add to every resource.
            Defaults to {}.
    """

    resource_group: resources.ResourceGroup
    vnet: network.VirtualNetwork
    subnet: network.Subnet
    network_security_group: network.NetworkSecurityGroup
    tags: Optional[dict[str, str]] = field(default_factory=dict)
