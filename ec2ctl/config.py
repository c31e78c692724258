"""Environment configuration: .env.<environment> files."""

import os
import re
import shutil
import tempfile
from pathlib import Path

from dotenv import dotenv_values

from .types import EnvConfig
from .utils import error, log

DEFAULT_ENVIRONMENT = "staging"
DEFAULT_GROUP = "default"

REQUIRED_KEYS = ("INSTANCE_TYPE", "REGION", "KEYPAIR", "AMI")
OPTIONAL_KEYS = ("GROUP", "SUBNET", "TAG", "SERVER", "SSH_USER")
SERVER_LINE = re.compile(r"^\s*(export\s+)?SERVER\s*=")


def config_path(environment: str = DEFAULT_ENVIRONMENT, directory: Path | None = None) -> Path:
    return (directory or Path.cwd()) / f".env.{environment}"


def load_config(
    environment: str = DEFAULT_ENVIRONMENT, directory: Path | None = None
) -> EnvConfig:
    """Load and check the settings for an environment.

    The file is parsed as plain KEY=value lines and never executed.

    :param environment: Environment name selecting .env.<environment>
    :param directory: Directory holding the file (default: current directory)
    :return: Config with lower-case keys and GROUP defaulted
    :raises SystemExit: If the file is missing or a required key is empty
    """
    path = config_path(environment, directory)
    if not path.is_file():
        error(f"No such file: '{path}'")

    values = dotenv_values(path, interpolate=False)
    missing = [key for key in REQUIRED_KEYS if not values.get(key)]
    if missing:
        error(f"Invalid config: '{path}' is missing {', '.join(missing)}")

    config: EnvConfig = {}
    for key in REQUIRED_KEYS + OPTIONAL_KEYS:
        if values.get(key):
            config[key.lower()] = values[key]
    config.setdefault("group", DEFAULT_GROUP)
    return config


def save_server(path: Path, ip: str) -> None:
    """Rewrite the SERVER= line of a config file, leaving other lines untouched.

    The new content goes to a temporary file next to the original, which is
    then renamed over it.

    :param path: Config file to update
    :param ip: Address to store
    """
    with open(path, newline="") as f:
        lines = f.readlines()

    replaced = False
    for i, line in enumerate(lines):
        if SERVER_LINE.match(line):
            ending = line[len(line.rstrip("\r\n")) :]
            lines[i] = f"SERVER={ip}{ending}"
            replaced = True
            break
    if not replaced:
        if lines and not lines[-1].endswith("\n"):
            lines[-1] += "\n"
        lines.append(f"SERVER={ip}\n")

    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", newline="") as f:
            f.writelines(lines)
        shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    log(f"Saved SERVER={ip} to '{path}'")
