"""
Shared fixtures: an in-memory stand-in for the docker command line.
"""
import inspect
import json
import shutil
from pathlib import Path

import pytest

from minipaas.ENGINE.docker_client import EngineClient
from minipaas.MANAGERS.metadata_extractor import MetadataExtractor
from minipaas.MANAGERS.service_orchestrator import ServiceOrchestrator
from minipaas.MODELS.options import RetryOptions
from minipaas.REGISTRY.metadata_cache import MetadataCache

DATA_DIR = Path(__file__).parent / "data"

HELLO_ID = "6950f04ee720641dd7c0215cce762f64c2b2649d51aa86fc242da8ed301b9110"
AUTOINC_ID = "e555080d282b0d2a79cb0ba3fdd56c629e6e250a2fb6fd6fefb56b484e873cc0"
PLAIN_ID = "511136ea3c5a64f264b78b5433614aec563103b4d4702f3ba7d4d2698e22c158"


class FakeRunner:
    """
    Records engine invocations and answers them from canned handlers.

    A handler is a string (the output), an exception (raised) or a callable
    taking the argument list, sync or async.
    """
    command = "docker"

    def __init__(self):
        self.calls = []
        self.interactive_calls = []
        self.handlers = {}
        self.inspect_data = {}

    def on(self, subcommand, handler):
        self.handlers[subcommand] = handler

    def count(self, subcommand):
        return sum(1 for call in self.calls if call[0] == subcommand)

    def args_for(self, subcommand):
        return [call for call in self.calls if call[0] == subcommand]

    async def run(self, args):
        self.calls.append(list(args))
        if args[0] == "inspect" and "inspect" not in self.handlers:
            return json.dumps([self.inspect_data[args[1]]])
        handler = self.handlers.get(args[0], "")
        if isinstance(handler, BaseException):
            raise handler
        if callable(handler):
            result = handler(list(args))
            if inspect.isawaitable(result):
                result = await result
            return result or ""
        return handler

    async def run_interactive(self, args):
        self.interactive_calls.append(list(args))
        return 0


def image_table(*rows):
    """Renders `images --no-trunc` output for (repository, tag, id) rows."""
    lines = ["REPOSITORY          TAG        IMAGE ID            CREATED        VIRTUAL SIZE"]
    for repository, tag, image_id in rows:
        lines.append(f"{repository}    {tag}    {image_id}    2 weeks ago    210 MB")
    lines.append("")
    return "\n".join(lines)


def image_inspect(image_id, env):
    return {"Id": image_id, "Config": {"Env": list(env)}}


def container_inspect(container_id, image_id, running=True,
                      started_at="2014-06-20T10:11:12.123456789Z"):
    return {
        "Id": container_id,
        "Image": image_id,
        "State": {"Running": running, "StartedAt": started_at},
    }


def copy_metadata(filename):
    """A `cp` handler that drops a metadata file where docker cp would."""
    def handler(args):
        destination = Path(args[2]) / "minipaas"
        destination.mkdir(parents=True, exist_ok=True)
        shutil.copy(DATA_DIR / filename, destination / filename)
        return ""
    return handler


def seed_docker(runner, images, containers=()):
    """
    Configures a runner with an image table and running containers.

    images: (repository, tag, id, env) tuples
    containers: container inspect objects, in `ps` listing order
    """
    runner.on("images", image_table(*[(r, t, i) for r, t, i, _ in images]))
    runner.on("ps", "\n".join(c["Id"] for c in containers) + "\n")
    for _, _, image_id, env in images:
        runner.inspect_data[image_id] = image_inspect(image_id, env)
    for container in containers:
        runner.inspect_data[container["Id"]] = container


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def engine(runner):
    return EngineClient(runner)


@pytest.fixture
def cache(tmp_path):
    return MetadataCache(tmp_path / "cache")


@pytest.fixture
def extractor(engine, cache):
    return MetadataExtractor(engine, cache, copy_options=RetryOptions(attempts=3, delay=0),
                             timeout=5.0)


@pytest.fixture
def orchestrator(engine, extractor):
    return ServiceOrchestrator(engine, extractor)
