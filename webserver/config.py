from modules.bastion import BastionSpecs
from modules.compute import VMSpecs
import pulumi

config = pulumi.Config()

# Environment configuration
azure_location: str = config.require("location")
resource_group_suffix: str = config.require("resource_group_suffix")
vnet_address_prefixes: list[str] = config.require_object(
    "vnet_address_prefixes"
)
subnet_address_prefixes: list[str] = config.require_object(
    "subnet_address_prefixes"
)

# Access configuration
ssh_source_address_prefixes: list[str] = config.get_object(
    "ssh_source_address_prefixes"
) or ["0.0.0.0/0"]
restrict_ssh_to_my_ip: bool = config.get_bool("restrict_ssh_to_my_ip") or False

# VM specifications
vm_spec = VMSpecs(**config.require_object("vm_spec"))

# Bastion toggle and specifications
create_bastion: bool = config.get_bool("create_bastion") or False
bastion_spec = BastionSpecs(**(config.get_object("bastion_spec") or {}))
