"""Type definitions for ec2ctl."""

from typing import TypedDict


class EnvConfig(TypedDict, total=False):
    """Settings loaded from a .env.<environment> file."""

    instance_type: str
    region: str
    keypair: str
    ami: str
    group: str
    subnet: str
    tag: str
    server: str
    ssh_user: str


class InstanceRow(TypedDict):
    """Running instance as shown by the list command."""

    id: str
    image: str
    address: str
