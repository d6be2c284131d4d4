"""Unit tests for the JSON Patch builders."""

from filer_injector.constants import STATUS_ANNOTATION
from filer_injector.injection.patch import (
    add_container,
    add_volume,
    escape_pointer_token,
    filer_volume_mount,
    is_notebook_container,
    update_annotation,
    update_working_volume_mounts,
)
from filer_injector.models.patch import dump_patch, load_patch
from filer_injector.models.sidecar import Container, Volume

NOTEBOOK = {"name": "nb", "env": [{"name": "NB_PREFIX", "value": "/notebook/ns/nb"}]}
PLAIN = {"name": "istio-proxy", "env": [{"name": "ISTIO_META", "value": "1"}]}


def _containers(*names: str) -> list[Container]:
    return [Container(name=name) for name in names]


class TestAddContainer:
    """Tests for add_container."""

    def test_empty_target_creates_list(self):
        ops = add_container([], _containers("a", "b"))
        assert [(op.op, op.path) for op in ops] == [
            ("add", "/spec/containers"),
            ("add", "/spec/containers/-"),
        ]
        assert ops[0].value == [{"name": "a", "args": [], "env": [], "volumeMounts": []}]
        assert ops[1].value["name"] == "b"

    def test_existing_target_appends(self):
        ops = add_container([NOTEBOOK], _containers("a", "b"))
        assert [op.path for op in ops] == ["/spec/containers/-", "/spec/containers/-"]
        assert [op.value["name"] for op in ops] == ["a", "b"]

    def test_nothing_added(self):
        assert add_container([NOTEBOOK], []) == []


class TestAddVolume:
    """Tests for add_volume."""

    def test_empty_target_creates_list(self):
        volumes = [Volume(name="fd", empty_dir={}), Volume(name="other", empty_dir={})]
        ops = add_volume([], volumes)
        assert ops[0].path == "/spec/volumes"
        assert ops[0].value == [{"name": "fd", "emptyDir": {}}]
        assert ops[1].path == "/spec/volumes/-"
        assert ops[1].value == {"name": "other", "emptyDir": {}}

    def test_existing_target_appends(self):
        ops = add_volume([{"name": "workspace"}], [Volume(name="fd", empty_dir={})])
        assert [op.path for op in ops] == ["/spec/volumes/-"]


class TestUpdateAnnotation:
    """Tests for update_annotation."""

    def test_absent_map_is_created(self):
        ops = update_annotation(None, {STATUS_ANNOTATION: "injected"})
        assert len(ops) == 1
        assert ops[0].op == "add"
        assert ops[0].path == "/metadata/annotations"
        assert ops[0].value == {STATUS_ANNOTATION: "injected"}

    def test_empty_map_is_replaced_whole(self):
        ops = update_annotation({}, {"a": "1", "b": "2"})
        assert [(op.op, op.path) for op in ops] == [("add", "/metadata/annotations")]
        assert ops[0].value == {"a": "1", "b": "2"}

    def test_new_key_is_added(self):
        ops = update_annotation({"other": "x"}, {STATUS_ANNOTATION: "injected"})
        assert len(ops) == 1
        assert ops[0].op == "add"
        assert ops[0].path == (
            "/metadata/annotations/filer-injector-webhook.das-zone.statcan~1status"
        )

    def test_existing_key_is_replaced(self):
        ops = update_annotation(
            {STATUS_ANNOTATION: "pending"}, {STATUS_ANNOTATION: "injected"}
        )
        assert ops[0].op == "replace"
        assert ops[0].value == "injected"

    def test_existing_empty_value_is_added(self):
        ops = update_annotation({STATUS_ANNOTATION: ""}, {STATUS_ANNOTATION: "injected"})
        assert ops[0].op == "add"

    def test_nothing_added(self):
        assert update_annotation(None, {}) == []
        assert update_annotation({"a": "1"}, {}) == []

    def test_pointer_escaping(self):
        assert escape_pointer_token("a/b~c") == "a~1b~0c"


class TestWorkingVolumeMounts:
    """Tests for the notebook container mount builder."""

    def test_is_notebook_container(self):
        assert is_notebook_container(NOTEBOOK)
        assert not is_notebook_container(PLAIN)
        assert not is_notebook_container({"name": "bare"})
        assert not is_notebook_container({"name": "bare", "env": None})

    def test_mount_shape(self):
        assert filer_volume_mount("csi-vol", "data/project", "acct") == {
            "name": "csi-vol",
            "mountPath": "/home/jovyan/filers/acct/data/project",
            "readOnly": False,
            "mountPropagation": "HostToContainer",
        }

    def test_first_mount_creates_list(self):
        ops = update_working_volume_mounts([dict(NOTEBOOK)], "csi-vol", "data", "acct", True)
        assert len(ops) == 1
        assert ops[0].path == "/spec/containers/0/volumeMounts"
        assert ops[0].value == [filer_volume_mount("csi-vol", "data", "acct")]

    def test_existing_mounts_are_appended(self):
        container = {**NOTEBOOK, "volumeMounts": [{"name": "ws", "mountPath": "/w"}]}
        ops = update_working_volume_mounts([container], "csi-vol", "data", "acct", True)
        assert ops[0].path == "/spec/containers/0/volumeMounts/-"
        assert ops[0].value == filer_volume_mount("csi-vol", "data", "acct")

    def test_later_mounts_are_appended(self):
        ops = update_working_volume_mounts([dict(NOTEBOOK)], "csi-vol", "data", "acct", False)
        assert ops[0].path == "/spec/containers/0/volumeMounts/-"

    def test_only_notebook_containers_are_mounted(self):
        ops = update_working_volume_mounts(
            [PLAIN, dict(NOTEBOOK)], "csi-vol", "data", "acct", True
        )
        assert [op.path for op in ops] == ["/spec/containers/1/volumeMounts"]

    def test_no_notebook_container(self):
        assert update_working_volume_mounts([PLAIN], "csi-vol", "data", "acct", True) == []


class TestPatchSerialization:
    """Tests for the patch document helpers."""

    def test_empty_patch(self):
        assert dump_patch([]) == b"[]"

    def test_dump_and_load(self):
        ops = update_annotation(None, {STATUS_ANNOTATION: "injected"})
        loaded = load_patch(dump_patch(ops))
        assert loaded == ops
