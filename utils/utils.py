import base64
import shlex

import requests

IPIFY_URL = "https://api.ipify.org"


def render_boot_script(index_html: str, http_port: int, ssh_port: int) -> str:
    """
    Returns the cloud-init boot script run on first start of the VM.

    The script serves `index_html` on `http_port` and moves sshd to
    `ssh_port`.
    """
    return (
        "#!/bin/bash\n"
        f"echo {shlex.quote(index_html)} > index.html\n"
        f"nohup python3 -m http.server {http_port} &\n"
        f'echo "Port {ssh_port}" >> /etc/ssh/sshd_config\n'
        "systemctl restart sshd\n"
    )


def encode_custom_data(script: str) -> str:
    # Azure expects custom_data base64 encoded
    return base64.b64encode(script.encode("utf-8")).decode("ascii")


def get_my_public_ip(timeout: float = 10.0) -> str:
    response = requests.get(IPIFY_URL, timeout=timeout)
    response.raise_for_status()
    return f"{response.text.strip()}/32"
