# __main__.py
"""
Pulumi program to create a single Linux web server VM, optionally
reachable through an Azure Bastion host.
"""

import modulepath_fixer  # noqa: F401

import os

from pulumi import export, log, ResourceOptions
from pulumi_azure_native import resources
from modules.bastion import Bastion
from modules.compute import VM
from modules.network import Network, NetworkSpecs, web_server_security_rules
from utils.module_dataclasses import EnvironmentSpecs
from utils.utils import get_my_public_ip
from config import (
    azure_location,
    bastion_spec,
    create_bastion,
    resource_group_suffix,
    restrict_ssh_to_my_ip,
    ssh_source_address_prefixes,
    subnet_address_prefixes,
    vm_spec,
    vnet_address_prefixes,
)

DEBUG = os.getenv("DEBUG")
default_tags = {
    "environment": "dev",
    "created_by": "pulumi",
    "purpose": "webserver",
}
resource_group_name = f"{azure_location}-{resource_group_suffix}"

### Setup Resource Group
resource_group = resources.ResourceGroup(
    resource_name=resource_group_name,
    location=azure_location,
    tags=default_tags,
)

### Setup Network
if restrict_ssh_to_my_ip:
    ssh_source_address_prefixes = [get_my_public_ip()]
    if DEBUG:
        log.info(f"Restricting SSH to {ssh_source_address_prefixes[0]}")
elif "0.0.0.0/0" in ssh_source_address_prefixes:
    log.warn(f"SSH port {vm_spec.ssh_port} is open to the internet")

network = Network(
    name=f"{resource_group_name}-web",
    network_spec=NetworkSpecs(
        vnet_address_prefixes=vnet_address_prefixes,
        subnet_address_prefixes=subnet_address_prefixes,
        security_rules=web_server_security_rules(
            http_port=vm_spec.http_port,
            ssh_port=vm_spec.ssh_port,
            ssh_source_address_prefixes=ssh_source_address_prefixes,
        ),
    ),
    resource_group=resource_group,
    location=azure_location,
    tags=default_tags,
    opts=ResourceOptions(parent=resource_group),
)

env_spec = EnvironmentSpecs(
    resource_group=resource_group,
    vnet=network.virtual_network,
    subnet=network.subnet,
    network_security_group=network.network_security_group,
    tags=default_tags,
)

### Setup VM
if DEBUG:
    log.info(
        f"Creating {vm_spec.size} VM {vm_spec.server_name} from {vm_spec.publisher}:{vm_spec.offer}:{vm_spec.sku}:{vm_spec.version}"  # noqa: E501
    )

vm = VM(
    name=vm_spec.server_name,
    vm_spec=vm_spec,
    env_spec=env_spec,
    opts=ResourceOptions(parent=network),
)

export("vm Id", vm.virtual_machine.id)
export("vm IP public", vm.public_ip_address)
export("vm IP private", vm.private_ip_address)

### Setup Bastion
if create_bastion:
    if DEBUG:
        log.info(f"Creating {bastion_spec.sku} bastion host")

    bastion = Bastion(
        name=f"{resource_group_name}-bastion",
        bastion_spec=bastion_spec,
        env_spec=env_spec,
        opts=ResourceOptions(parent=network),
    )

    export("bastion host name", bastion.bastion_host_name)
