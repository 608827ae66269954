from typing import Optional
from attr import dataclass
import re

from pulumi import ComponentResource, Output, ResourceOptions
from pulumi_azure_native import (
    compute as az_compute,
    network as az_network,
)
from pulumi_random import RandomPassword

from utils.module_dataclasses import EnvironmentSpecs
from utils.utils import encode_custom_data, render_boot_script


@dataclass
class VMSpecs:
    admin_username: str
    admin_password_version: str
    server_name: str
    size: str = az_compute.VirtualMachineSizeTypes.STANDARD_B1S
    publisher: str = "Canonical"
    offer: str = "0001-com-ubuntu-server-jammy"
    sku: str = "22_04-lts-gen2"
    version: str = "latest"
    os_disk_delete_option: str = "Delete"
    ssh_public_key: Optional[str] = None
    http_port: int = 80
    ssh_port: int = 1988
    index_html: str = "Hello, World!"

    def __attrs_post_init__(self):
        if not re.match(r"^[A-Za-z0-9\-]+$", self.server_name):
            raise ValueError(
                f"server_name '{self.server_name}' contains invalid characters. Only letters, numbers, and hyphens are allowed."  # noqa: E501
            )
        for port_name in ("http_port", "ssh_port"):
            port = getattr(self, port_name)
            if not 1 <= port <= 65535:
                raise ValueError(f"{port_name} {port} is not a valid TCP port")
        if self.http_port == self.ssh_port:
            raise ValueError(
                f"http_port and ssh_port must differ, both are {self.http_port}"
            )

    @property
    def authorized_keys_path(self) -> str:
        return f"/home/{self.admin_username}/.ssh/authorized_keys"

    @property
    def boot_script(self) -> str:
        return render_boot_script(
            index_html=self.index_html,
            http_port=self.http_port,
            ssh_port=self.ssh_port,
        )


class VM(ComponentResource):
    """
    Create a Linux web server VM reachable through a static public IP.
    """

    def __init__(
        self,
        name: str,
        vm_spec: VMSpecs,
        env_spec: EnvironmentSpecs,
        opts: Optional[ResourceOptions] = None,
    ):
        super().__init__("azwebserver:compute:VM", name, None, opts)

        self.opts = ResourceOptions.merge(opts, ResourceOptions(parent=self))

        self.public_ip = az_network.PublicIPAddress(
            f"{vm_spec.server_name}-public-ip",
            resource_group_name=env_spec.resource_group.name,
            public_ip_allocation_method=az_network.IPAllocationMethod.STATIC,
            opts=self.opts,
            tags=env_spec.tags,
        )

        self.network_interface = az_network.NetworkInterface(
            f"{vm_spec.server_name}-nic",
            resource_group_name=env_spec.resource_group.name,
            ip_configurations=[
                az_network.NetworkInterfaceIPConfigurationArgs(
                    name=f"{vm_spec.server_name}-ipconfig",
                    subnet=az_network.SubnetArgs(
                        id=env_spec.subnet.id,
                    ),
                    private_ip_allocation_method=az_network.IPAllocationMethod.DYNAMIC,  # noqa: E501
                    public_ip_address=az_network.PublicIPAddressArgs(
                        id=self.public_ip.id,
                    ),
                )
            ],
            network_security_group=az_network.NetworkSecurityGroupArgs(
                id=env_spec.network_security_group.id,
            ),
            opts=self.opts,
            tags=env_spec.tags,
        )

        self.password = RandomPassword(
            f"{vm_spec.server_name}-basic-auth-{vm_spec.admin_username}-password",
            length=14,
            keepers={"version": vm_spec.admin_password_version},
            lower=True,
            upper=True,
            special=True,
            override_special="!#%^*_+=-./?~",
            numeric=True,
            opts=self.opts,
        )

        public_keys = []
        if vm_spec.ssh_public_key:
            public_keys.append(
                az_compute.SshPublicKeyArgs(
                    key_data=vm_spec.ssh_public_key,
                    path=vm_spec.authorized_keys_path,
                )
            )

        self.virtual_machine = az_compute.VirtualMachine(
            f"{vm_spec.server_name}-vm",
            resource_group_name=env_spec.resource_group.name,
            network_profile=az_compute.NetworkProfileArgs(
                network_interfaces=[
                    az_compute.NetworkInterfaceReferenceArgs(
                        id=self.network_interface.id,
                        primary=True,
                    )
                ]
            ),
            hardware_profile=az_compute.HardwareProfileArgs(
                vm_size=vm_spec.size,
            ),
            os_profile=az_compute.OSProfileArgs(
                computer_name=vm_spec.server_name,
                admin_username=vm_spec.admin_username,
                admin_password=self.password.result,
                custom_data=encode_custom_data(vm_spec.boot_script),
                linux_configuration=az_compute.LinuxConfigurationArgs(
                    disable_password_authentication=False,
                    provision_vm_agent=True,
                    enable_vm_agent_platform_updates=True,
                    patch_settings=az_compute.LinuxPatchSettingsArgs(
                        patch_mode=az_compute.LinuxVMGuestPatchMode.AUTOMATIC_BY_PLATFORM,  # noqa: E501
                        automatic_by_platform_settings=az_compute.LinuxVMGuestPatchAutomaticByPlatformSettingsArgs(  # noqa: E501
                            bypass_platform_safety_checks_on_user_schedule=False,
                            reboot_setting="IfRequired",
                        ),
                    ),
                    ssh=az_compute.SshConfigurationArgs(
                        public_keys=public_keys,
                    )
                    if public_keys
                    else None,
                ),
            ),
            storage_profile=az_compute.StorageProfileArgs(
                os_disk=az_compute.OSDiskArgs(
                    name=f"{vm_spec.server_name}-os-disk",
                    caching=az_compute.CachingTypes.READ_WRITE,
                    create_option=az_compute.DiskCreateOption.FROM_IMAGE,
                    delete_option=vm_spec.os_disk_delete_option,
                    managed_disk=az_compute.ManagedDiskParametersArgs(
                        storage_account_type=az_compute.StorageAccountTypes.STANDARD_LRS,
                    ),
                ),
                image_reference=az_compute.ImageReferenceArgs(
                    publisher=vm_spec.publisher,
                    offer=vm_spec.offer,
                    sku=vm_spec.sku,
                    version=vm_spec.version,
                ),
            ),
            opts=ResourceOptions.merge(
                self.opts,
                ResourceOptions(
                    depends_on=[env_spec.resource_group, self.network_interface]
                ),
            ),
            tags=env_spec.tags,
        )

        self.public_ip_address: Output[str] = self.public_ip.ip_address
        self.private_ip_address: Output[str] = (
            self.network_interface.ip_configurations.apply(
                lambda configs: configs[0].private_ip_address if configs else None
            )
        )

        self.register_outputs(
            {
                "vm_id": self.virtual_machine.id,
                "public_ip_address": self.public_ip_address,
                "private_ip_address": self.private_ip_address,
            }
        )
