"""
Unit tests for the service orchestrator.
"""
import pytest

from conftest import AUTOINC_ID, HELLO_ID, PLAIN_ID, container_inspect, copy_metadata, seed_docker
from minipaas.exceptions import CommandError, PullError, StopError
from minipaas.MODELS.service import ServiceStatus

IMAGES = [
    ("minipaas/hello", "latest", HELLO_ID, ["minipaas_version=1"]),
    ("minipaas/autoinc", "v1", AUTOINC_ID, ["minipaas_version=1"]),
    ("ubuntu", "14.04", PLAIN_ID, ["PATH=/usr/bin"]),
]


def serve_metadata(runner):
    """Starting an extraction container yields an id naming the image's file."""
    def run(args):
        if "--entrypoint=/bin/bash" not in args:
            return "svc-" + args[-1][:8]
        return "tmp-" + args[-2][:8]

    def cp(args):
        filename = "service.json" if args[1].startswith("tmp-" + HELLO_ID[:8]) else "service.ttl"
        return copy_metadata(filename)(args)

    runner.on("run", run)
    runner.on("cp", cp)


@pytest.mark.asyncio
async def test_services(orchestrator, runner):
    seed_docker(runner, IMAGES, [container_inspect("c1", HELLO_ID)])
    serve_metadata(runner)

    services = {s.repo_tag: s for s in await orchestrator.services()}

    hello = services["minipaas/hello:latest"]
    assert hello.title == "Minipaas: Hello, World!"
    assert hello.container.id == "c1"
    assert hello.status == ServiceStatus.RUNNING

    autoinc = services["minipaas/autoinc:v1"]
    assert autoinc.title == "Minipaas: Autoincrement"
    assert autoinc.status == ServiceStatus.STOPPED

    plain = services["ubuntu:14.04"]
    assert plain.metadata is None
    assert plain.diagnostic is None
    assert plain.minipaas_version is None
    assert plain.status == ServiceStatus.STOPPED


@pytest.mark.asyncio
async def test_environment_gate(orchestrator, runner):
    seed_docker(runner, [
        ("ubuntu", "14.04", PLAIN_ID, ["PATH=/usr/bin"]),
        ("minipaas/next", "latest", AUTOINC_ID, ["minipaas_version=2"]),
    ])

    services = await orchestrator.services()

    assert len(services) == 2
    assert runner.count("run") == 0
    assert runner.count("cp") == 0
    assert all(s.metadata is None for s in services)
    assert services[1].minipaas_version == 2


@pytest.mark.asyncio
async def test_extraction_failure_is_per_service(orchestrator, runner):
    seed_docker(runner, IMAGES)

    def cp(args):
        if args[1].startswith("tmp-" + HELLO_ID[:8]):
            raise CommandError("docker", args, returncode=1)
        return copy_metadata("service.ttl")(args)

    runner.on("run", lambda args: "tmp-" + args[-2][:8])
    runner.on("cp", cp)

    services = {s.repo_tag: s for s in await orchestrator.services()}

    assert services["minipaas/hello:latest"].status == ServiceStatus.ERROR
    assert services["minipaas/hello:latest"].diagnostic
    assert services["minipaas/autoinc:v1"].title == "Minipaas: Autoincrement"


@pytest.mark.asyncio
async def test_pull_relists(orchestrator, runner):
    seed_docker(runner, IMAGES)
    serve_metadata(runner)

    services = await orchestrator.pull(["minipaas/hello"])

    assert runner.args_for("pull") == [["pull", "minipaas/hello:latest"]]
    assert [s.repo_tag for s in services] == ["minipaas/hello:latest"]


@pytest.mark.asyncio
async def test_pull_failure_propagates(orchestrator, runner):
    runner.on("pull", CommandError("docker", ["pull"], returncode=1))
    with pytest.raises(PullError):
        await orchestrator.pull(["minipaas/hello"])


@pytest.mark.asyncio
async def test_start_relists(orchestrator, runner):
    seed_docker(runner, IMAGES)
    serve_metadata(runner)

    await orchestrator.start(["minipaas/hello", "minipaas/autoinc:v1"])

    started = [call for call in runner.args_for("run") if "--entrypoint=/bin/bash" not in call]
    assert started == [
        ["run", "--interactive=true", "--detach=true", "minipaas/hello:latest"],
        ["run", "--interactive=true", "--detach=true", "minipaas/autoinc:v1"],
    ]


@pytest.mark.asyncio
async def test_stop_only_services_with_containers(orchestrator, runner):
    seed_docker(runner, IMAGES, [
        container_inspect("c1", HELLO_ID),
        container_inspect("c3", PLAIN_ID),
    ])
    serve_metadata(runner)

    await orchestrator.stop([])

    stopped = [call[1] for call in runner.args_for("stop") if not call[1].startswith("tmp-")]
    assert sorted(stopped) == ["c1", "c3"]


@pytest.mark.asyncio
async def test_stop_without_running_containers(orchestrator, runner):
    seed_docker(runner, IMAGES)
    serve_metadata(runner)

    await orchestrator.stop(["minipaas/autoinc:v1"])

    assert [c for c in runner.args_for("stop") if not c[1].startswith("tmp-")] == []


@pytest.mark.asyncio
async def test_stop_failure_aggregates(orchestrator, runner):
    seed_docker(runner, [IMAGES[2]], [container_inspect("c3", PLAIN_ID)])
    runner.on("stop", CommandError("docker", ["stop", "c3"], returncode=1))

    with pytest.raises(StopError) as excinfo:
        await orchestrator.stop()
    assert len(excinfo.value.errors) == 1


@pytest.mark.asyncio
async def test_shell(orchestrator, runner):
    seed_docker(runner, [IMAGES[2]])
    runner.on("run", "sh1\n")

    status = await orchestrator.shell("ubuntu:14.04")
    await orchestrator.engine.drain()

    assert status == 0
    assert runner.args_for("run") == [[
        "run", "--interactive=true", "--detach=true", "--entrypoint=/bin/bash", PLAIN_ID, "--login",
    ]]
    assert runner.interactive_calls[0][3] == "sh1"
    assert runner.args_for("stop") == [["stop", "sh1"]]
    assert runner.args_for("rm") == [["rm", "--force", "sh1"]]
