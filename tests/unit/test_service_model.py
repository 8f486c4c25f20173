from datetime import datetime, timedelta, timezone

from rdflib import Graph, Literal, URIRef

from minipaas.METADATA.store import MetadataStore
from minipaas.MODELS.records import ContainerRecord, ImageRecord, ServiceInput
from minipaas.MODELS.service import Service, ServiceStatus
from minipaas.UTILS.duration import format_duration

STARTED = datetime(2014, 6, 20, 10, 0, 0, tzinfo=timezone.utc)


def make_service(env=None, container=None, metadata=None):
    service = Service.from_input(
        ServiceInput(
            image=ImageRecord(repository="minipaas/hello", tag="latest", id="sha256:6950f04ee720641dd7c0"),
            environment=env or {},
            container=container,
        ),
        "/tmp/cache/6950f04ee720",
    )
    service.metadata = metadata
    return service


def titled_store():
    graph = Graph()
    graph.add((URIRef("http://id.minipaas.org/x/service"),
               URIRef("http://purl.org/dc/terms/title"),
               Literal("Hello")))
    return MetadataStore("http://id.minipaas.org/x/service", graph)


def test_version_parsing():
    assert make_service({"minipaas_version": "1"}).minipaas_version == 1
    assert make_service({"minipaas_version": "one"}).minipaas_version is None
    assert make_service().minipaas_version is None


def test_managed_requires_exact_version():
    assert make_service({"minipaas_version": "1"}).is_managed
    assert not make_service({"minipaas_version": "01"}).is_managed
    assert not make_service({"minipaas_version": "2"}).is_managed
    assert not make_service().is_managed


def test_status_error_when_managed_without_metadata():
    running = ContainerRecord(id="c1", image_id="x", running=True, started_at=STARTED)
    assert make_service({"minipaas_version": "1"}, container=running).status == ServiceStatus.ERROR


def test_status_running_and_stopped():
    running = ContainerRecord(id="c1", image_id="x", running=True, started_at=STARTED)
    exited = ContainerRecord(id="c1", image_id="x", running=False, started_at=STARTED)
    store = titled_store()
    assert make_service({"minipaas_version": "1"}, running, store).status == ServiceStatus.RUNNING
    assert make_service({"minipaas_version": "1"}, exited, store).status == ServiceStatus.STOPPED
    assert make_service().status == ServiceStatus.STOPPED


def test_title_and_short_id():
    service = make_service({"minipaas_version": "1"}, metadata=titled_store())
    assert service.title == "Hello"
    assert service.short_id == "6950f04ee720"
    assert make_service().title is None


def test_running_for():
    running = ContainerRecord(id="c1", image_id="x", running=True, started_at=STARTED)
    service = make_service(container=running)
    assert service.running_for(STARTED + timedelta(hours=3)) == timedelta(hours=3)
    assert make_service().running_for() is None
    exited = ContainerRecord(id="c1", image_id="x", running=False, started_at=STARTED)
    assert make_service(container=exited).running_for() is None


def test_format_duration():
    assert format_duration(timedelta(hours=3, minutes=5)) == "3 hours"
    assert format_duration(timedelta(seconds=1)) == "1 second"
    assert format_duration(timedelta(days=2)) == "2 days"
    assert format_duration(timedelta(0)) == "less than a second"
