#!/usr/bin/env python3
"""Launch, terminate and list EC2 instances.

Prerequisites: EC2 API tools on PATH and credentials configured for them,
plus a .env.<environment> file in the current directory.

Usage: ec2ctl <command> [options]

Examples:
    ec2ctl launch
    ec2ctl launch production --role web
    ec2ctl terminate i-1a2b3c4d
    ec2ctl list
"""

import os
import sys
from pathlib import Path

import cyclopts
from dotenv import find_dotenv, load_dotenv
from rich import print

from .config import DEFAULT_ENVIRONMENT, config_path, load_config, save_server
from .ec2 import (
    LAUNCH_TOOLS,
    LIST_TOOLS,
    TERMINATE_TOOLS,
    check_tools,
    describe_instances,
    forget_host,
    get_instance_ip,
    run_instance,
    tag_instance,
    terminate_instance,
    wait_for_running,
)
from .parsing import parse_running_instances
from .utils import error, log, setup_logging, warn

COMMANDS = ("launch", "terminate", "list")
DEFAULT_SSH_USER = "ubuntu"

app = cyclopts.App(
    name="ec2ctl",
    help="Launch, terminate and list EC2 instances",
)


def resolve_tag(
    environment: str,
    role: str | None = None,
    override: str | None = None,
    directory: Path | None = None,
) -> str:
    """Name an instance after the project directory, role and environment.

    :param environment: Environment name
    :param role: Optional role, inserted between project and environment
    :param override: Explicit TAG from the config, wins over everything
    :param directory: Project directory (default: current directory)
    :return: Tag such as 'myapp_web_staging'
    """
    if override:
        return override
    parts = [(directory or Path.cwd()).name]
    if role:
        parts.append(role)
    parts.append(environment)
    return "_".join(parts)


@app.default
def usage():
    """Print usage and exit with an error."""
    app.help_print()
    sys.exit(1)


@app.command(name="launch")
def launch(environment: str = DEFAULT_ENVIRONMENT, *, role: str | None = None):
    """Launch an instance, wait until it runs, tag it and save its IP.

    :param environment: Environment selecting the .env.<environment> file
    :param role: Role included in the instance tag
    """
    if environment in COMMANDS:
        error(f"Ambiguous command: 'launch {environment}'. Run one command at a time.")

    config = load_config(environment)
    check_tools(LAUNCH_TOOLS)
    region = config["region"]

    tag = resolve_tag(environment, role, config.get("tag"))
    log(f"Launching '{tag}' ('{config['instance_type']}') in '{region}'...")
    instance_id = run_instance(config)
    log(f"Launched '{instance_id}'")

    wait_for_running(instance_id, region)
    tag_instance(instance_id, region, tag)

    ip = get_instance_ip(instance_id, region)
    if not ip:
        error(f"Could not resolve an IP address for '{instance_id}'")

    log("Instance ready!")
    ssh_user = config.get("ssh_user", DEFAULT_SSH_USER)
    print(f"  IP: {ip}")
    print(f"  SSH: ssh -i ~/.ssh/{config['keypair']}.pem {ssh_user}@{ip}")

    save_server(config_path(environment), ip)


@app.command(name="terminate")
def terminate(instance_id: str):
    """Terminate an instance and forget its host key.

    :param instance_id: Instance to terminate, e.g. i-1a2b3c4d
    """
    config = load_config(DEFAULT_ENVIRONMENT)
    check_tools(TERMINATE_TOOLS)
    region = config["region"]

    wait_for_running(instance_id, region)

    ip = get_instance_ip(instance_id, region)
    if ip:
        forget_host(ip)
    else:
        warn(f"Could not resolve an IP address for '{instance_id}', known_hosts left as is")

    log(f"Terminating '{instance_id}'...")
    terminate_instance(instance_id, region)
    log("Instance terminated")


@app.command(name="list")
def list_instances():
    """List running instances: id, image and address."""
    config = load_config(DEFAULT_ENVIRONMENT)
    check_tools(LIST_TOOLS)
    region = config["region"]

    instances = parse_running_instances(describe_instances(region))
    if not instances:
        log(f"No running instances in '{region}'")
        return

    max_id = max(len(i["id"]) for i in instances)
    max_image = max(len(i["image"]) for i in instances)

    for i in instances:
        print(f"{i['id'].ljust(max_id)}  {i['image'].ljust(max_image)}  {i['address']}")


def main(tokens: list[str] | None = None):
    load_dotenv(find_dotenv(usecwd=True))
    setup_logging(os.getenv("EC2CTL_LOG_LEVEL", "INFO"))
    try:
        app(tokens, exit_on_error=False)
    except cyclopts.CycloptsError:
        app.help_print()
        sys.exit(1)


if __name__ == "__main__":
    main()
