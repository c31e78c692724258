"""Parsers for the tab-separated text printed by the EC2 API tools.

The tools print one record per line, the first column naming the record type
(RESERVATION, INSTANCE, NIC, NICASSOCIATION, TAG, ...). Columns are split on
whitespace runs, so empty columns collapse and positions are only stable for
the leading fields.
"""

import re

from .types import InstanceRow

INSTANCE_PREFIX = "INSTANCE"
NIC_ASSOCIATION_PREFIX = "NICASSOCIATION"
INSTANCE_STATES = {"pending", "running", "shutting-down", "terminated", "stopping", "stopped"}


def _records(raw: str, prefix: str) -> list[list[str]]:
    return [
        fields
        for fields in (line.split() for line in raw.splitlines())
        if fields and fields[0] == prefix
    ]


def parse_instance_id(raw: str) -> str:
    """Extract the new instance id from ec2-run-instances output.

    Strips the INSTANCE token and the whitespace after it, then cuts
    everything from the next whitespace onwards.

    :param raw: stdout of ec2-run-instances
    :return: Instance id, or empty string if no INSTANCE line was found
    """
    for line in raw.splitlines():
        if not line.startswith(INSTANCE_PREFIX):
            continue
        rest = re.sub(rf"^{INSTANCE_PREFIX}\s*", "", line)
        return re.sub(r"\s.*$", "", rest)
    return ""


def parse_ip_from_describe(raw: str) -> str:
    """Extract the address to SSH to from ec2-describe-instances output.

    Subnet-backed instances carry a NICASSOCIATION line whose second column is
    the public IP. Classic instances have none, so fall back to the public DNS
    column of the INSTANCE line.

    :param raw: stdout of ec2-describe-instances for a single instance
    :return: IP address or DNS name, empty string if neither is present
    """
    for fields in _records(raw, NIC_ASSOCIATION_PREFIX):
        if len(fields) > 1:
            return fields[1]
    for fields in _records(raw, INSTANCE_PREFIX):
        # no DNS name yet: the state column shifts into its place
        if len(fields) > 3 and fields[3] not in INSTANCE_STATES:
            return fields[3]
    return ""


def parse_running_instances(raw: str) -> list[InstanceRow]:
    """:return: id, image and address of every INSTANCE line in running state"""
    rows = []
    for fields in _records(raw, INSTANCE_PREFIX):
        if "running" not in fields or len(fields) < 4:
            continue
        rows.append({"id": fields[1], "image": fields[2], "address": fields[3]})
    return rows


def is_running(raw: str) -> bool:
    return "running" in raw
