"""Wrappers around the EC2 API command-line tools."""

import shutil
import subprocess
import time
from typing import Callable

from .parsing import is_running, parse_instance_id, parse_ip_from_describe
from .types import EnvConfig
from .utils import error, log, run_cmd, warn

RUN_INSTANCES = "ec2-run-instances"
DESCRIBE_INSTANCES = "ec2-describe-instances"
CREATE_TAGS = "ec2-create-tags"
TERMINATE_INSTANCES = "ec2-terminate-instances"
SSH_KEYGEN = "ssh-keygen"

LAUNCH_TOOLS = (RUN_INSTANCES, DESCRIBE_INSTANCES, CREATE_TAGS)
TERMINATE_TOOLS = (DESCRIBE_INSTANCES, TERMINATE_INSTANCES)
LIST_TOOLS = (DESCRIBE_INSTANCES,)

POLL_INTERVAL = 5
POLL_TIMEOUT = 181


def check_tools(tools: tuple[str, ...]) -> None:
    """Fail fast if any required command is not on PATH.

    :raises SystemExit: If a tool is missing
    """
    for tool in tools:
        if shutil.which(tool) is None:
            error(f"Missing dependency: '{tool}' not found on PATH")


def run_instance(config: EnvConfig) -> str:
    """Launch one instance with the configured image, type and network.

    :param config: Loaded environment config
    :return: New instance id
    :raises SystemExit: If the command fails or prints no instance id
    """
    args = [
        RUN_INSTANCES,
        config["ami"],
        "-t",
        config["instance_type"],
        "-g",
        config.get("group", "default"),
        "--region",
        config["region"],
        "-k",
        config["keypair"],
    ]
    if config.get("subnet"):
        args.extend(["-s", config["subnet"]])

    output = run_cmd(*args)
    instance_id = parse_instance_id(output)
    if not instance_id:
        error(f"Could not find an instance id in '{RUN_INSTANCES}' output")
    return instance_id


def describe_instance(instance_id: str, region: str) -> str:
    return run_cmd(DESCRIBE_INSTANCES, instance_id, "--region", region)


def describe_instances(region: str) -> str:
    return run_cmd(DESCRIBE_INSTANCES, "--region", region)


def tag_instance(instance_id: str, region: str, tag: str) -> None:
    run_cmd(CREATE_TAGS, instance_id, "--region", region, "--tag", f"Name={tag}")
    log(f"Tagged '{instance_id}' as '{tag}'")


def terminate_instance(instance_id: str, region: str) -> None:
    run_cmd(TERMINATE_INSTANCES, instance_id, "--region", region)


def get_instance_ip(instance_id: str, region: str) -> str:
    """:return: Public IP (or DNS name) of the instance, empty if unknown"""
    return parse_ip_from_describe(describe_instance(instance_id, region))


def forget_host(ip: str) -> None:
    """Remove a host from ~/.ssh/known_hosts so a reused IP is not rejected."""
    try:
        result = subprocess.run([SSH_KEYGEN, "-R", ip], capture_output=True, text=True)
    except FileNotFoundError:
        warn(f"'{SSH_KEYGEN}' not found, '{ip}' left in known_hosts")
        return
    if result.returncode != 0:
        warn(f"Could not remove '{ip}' from known_hosts: {result.stderr.strip()}")
    else:
        log(f"Removed '{ip}' from known_hosts")


def wait_for_running(
    instance_id: str,
    region: str,
    *,
    describe: Callable[[str, str], str] | None = None,
    sleep: Callable[[float], None] | None = None,
    interval: int = POLL_INTERVAL,
    timeout: int = POLL_TIMEOUT,
) -> int:
    """Poll instance state until it reports running.

    The status is queried once per tick. After a non-running answer the
    timeout is checked with a strict `>` and then the loop sleeps for one
    interval, so the last query happens at the first tick past the timeout.

    :param instance_id: Instance to watch
    :param region: Region of the instance
    :param describe: Status query, defaults to ec2-describe-instances
    :param sleep: Sleep function, defaults to time.sleep
    :return: Seconds waited
    :raises SystemExit: If the instance is not running within the timeout
    """
    describe = describe or describe_instance
    sleep = sleep or time.sleep

    log(f"Waiting for '{instance_id}' to start...")
    elapsed = 0
    while True:
        if is_running(describe(instance_id, region)):
            log(f"'{instance_id}' is running ({elapsed}s)")
            return elapsed
        if elapsed > timeout:
            error(f"Timeout waiting for '{instance_id}' to start after {elapsed}s")
        sleep(interval)
        elapsed += interval
