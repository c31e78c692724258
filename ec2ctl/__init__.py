"""ec2ctl - launch, terminate and list EC2 instances through the EC2 API tools."""

from .cli import app, main, resolve_tag
from .config import load_config, save_server
from .ec2 import get_instance_ip, wait_for_running
from .parsing import parse_instance_id, parse_ip_from_describe, parse_running_instances
from .types import EnvConfig, InstanceRow
from .utils import error, log, run_cmd, setup_logging, warn

__all__ = [
    "app",
    "main",
    "resolve_tag",
    "load_config",
    "save_server",
    "get_instance_ip",
    "wait_for_running",
    "parse_instance_id",
    "parse_ip_from_describe",
    "parse_running_instances",
    "EnvConfig",
    "InstanceRow",
    "error",
    "log",
    "run_cmd",
    "setup_logging",
    "warn",
]
