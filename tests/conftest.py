"""Fixtures that stand in for the EC2 API tools and a project directory."""

import subprocess
from pathlib import Path

import pytest

import ec2ctl.ec2

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "ec2"

STAGING_CONFIG = """\
# staging settings
INSTANCE_TYPE=t2.micro
REGION=us-east-1
KEYPAIR=deploy-key
AMI=ami-1a2b3c4d
SUBNET=subnet-1a2b3c4d
SERVER=
"""


def read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text()


class FakeEC2:
    """Replacement for run_cmd that answers with captured tool output.

    Calls are recorded in order. ec2-describe-instances answers come from
    `describe_queue` first, then from `outputs`.
    """

    def __init__(self):
        self.calls: list[tuple[str, ...]] = []
        self.outputs = {
            "ec2-run-instances": read_fixture("run_instances.txt"),
            "ec2-describe-instances": read_fixture("describe_vpc.txt"),
            "ec2-create-tags": "TAG\tinstance\ti-1a2b3c4d\tName\tmyapp_staging",
            "ec2-terminate-instances": "INSTANCE\ti-1a2b3c4d\trunning\tshutting-down",
        }
        self.describe_queue: list[str] = []
        self.keygen_returncode = 0

    def __call__(self, *args, check: bool = True) -> str:
        self.calls.append(args)
        if args[0] == "ec2-describe-instances" and self.describe_queue:
            return self.describe_queue.pop(0).strip()
        return self.outputs.get(args[0], "").strip()

    def commands(self) -> list[str]:
        return [call[0] for call in self.calls]

    def call(self, command: str) -> tuple[str, ...]:
        return next(c for c in self.calls if c[0] == command)

    def run(self, args, **kwargs):
        self.calls.append(tuple(args))
        return subprocess.CompletedProcess(args, self.keygen_returncode, "", "")


@pytest.fixture
def fake_ec2(monkeypatch):
    fake = FakeEC2()
    monkeypatch.setattr(ec2ctl.ec2, "run_cmd", fake)
    monkeypatch.setattr(ec2ctl.ec2.subprocess, "run", fake.run)
    monkeypatch.setattr(ec2ctl.ec2.shutil, "which", lambda tool: f"/usr/local/bin/{tool}")
    monkeypatch.setattr(ec2ctl.ec2.time, "sleep", lambda seconds: None)
    return fake


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    """A 'myapp' working directory holding .env.staging."""
    path = tmp_path / "myapp"
    path.mkdir()
    (path / ".env.staging").write_text(STAGING_CONFIG)
    monkeypatch.chdir(path)
    return path
