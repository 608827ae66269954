import base64
import shlex

import pytest
import requests

from utils import utils
from utils.utils import encode_custom_data, get_my_public_ip, render_boot_script


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_boot_script_serves_page_and_moves_sshd():
    script = render_boot_script("Hello, World!", http_port=80, ssh_port=1988)

    assert script.splitlines() == [
        "#!/bin/bash",
        "echo 'Hello, World!' > index.html",
        "nohup python3 -m http.server 80 &",
        'echo "Port 1988" >> /etc/ssh/sshd_config',
        "systemctl restart sshd",
    ]


def test_boot_script_uses_configured_ports():
    script = render_boot_script("hi", http_port=8080, ssh_port=2222)

    assert "http.server 8080 &" in script
    assert "Port 2222" in script


def test_encode_custom_data_is_base64():
    script = render_boot_script("Hello, World!", http_port=80, ssh_port=1988)
    encoded = encode_custom_data(script)

    assert base64.b64decode(encoded).decode("utf-8") == script


def test_get_my_public_ip_returns_host_prefix(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse("198.51.100.7\n")

    monkeypatch.setattr(utils.requests, "get", fake_get)

    assert get_my_public_ip() == "198.51.100.7/32"
    assert calls == [(utils.IPIFY_URL, 10.0)]


def test_get_my_public_ip_raises_on_http_error(monkeypatch):
    monkeypatch.setattr(
        utils.requests, "get", lambda url, timeout: FakeResponse("", 503)
    )

    with pytest.raises(requests.HTTPError):
        get_my_public_ip()


def test_boot_script_keeps_page_text_verbatim():
    page = 'Say "hi" $HOME `id -u` $(reboot) it\'s done'
    script = render_boot_script(page, http_port=80, ssh_port=1988)
    echo_line = script.splitlines()[1]

    assert shlex.split(echo_line) == ["echo", page, ">", "index.html"]
