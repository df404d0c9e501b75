"""Tests for configuration assembly and rendering."""

from pathlib import Path

import pytest
import yaml

from assembly.assembler import (
    DiagnosticGroups,
    ProjectConfigDraft,
    assemble_config,
    build_user_message,
    relative_package_dir,
    remove_default_flags,
)
from assembly.writer import render_config, write_config
from descriptor.loader import PackageDescriptor
from discovery.packages import DiscoveredPackage, PackageDescriptorRef
from resolution.resolver import ResolvedPlan
from snapshots.models import SnapshotLocation

ROOT = Path("/proj")
LTS = SnapshotLocation.parse("lts-22.28")


def _discovered(directory, name, flags=None):
    path = directory / "package.yaml"
    descriptor = PackageDescriptor(name=name, path=path, flags=flags or {})
    return DiscoveredPackage(PackageDescriptorRef(path, directory), name, descriptor)


class TestRelativePackageDir:
    """Rendering package directories."""

    def test_root_is_dot(self):
        assert relative_package_dir(ROOT, ROOT) == "."

    def test_nested(self):
        assert relative_package_dir(ROOT, ROOT / "libs" / "core") == "libs/core"

    def test_outside_root_stays_absolute(self):
        assert relative_package_dir(ROOT, Path("/elsewhere/pkg")) == "/elsewhere/pkg"


class TestBuildUserMessage:
    """Message synthesis from diagnostic groups."""

    def test_no_diagnostics_means_no_message(self):
        assert build_user_message(DiagnosticGroups()) is None

    def test_one_paragraph_per_group_plus_hint(self):
        message = build_user_message(
            DiagnosticGroups(duplicates=["x"], incompatible=["y"], extra_deps={"acme": "0.3"})
        )

        paragraphs = message.rstrip("\n").split("\n\n")
        assert len(paragraphs) == 4
        assert "conflicting" in paragraphs[0]
        assert "incompatible" in paragraphs[1]
        assert "external packages" in paragraphs[2]
        assert paragraphs[3].startswith("You can omit this message")
        assert message.endswith("\n")

    def test_only_extra_deps(self):
        message = build_user_message(DiagnosticGroups(extra_deps={"acme": "0.3"}))

        assert message.count("\n\n") == 1
        assert "external packages" in message


class TestRemoveDefaultFlags:
    """Dropping flags equal to declared defaults."""

    def test_defaults_are_dropped(self):
        descriptors = {"app": PackageDescriptor("app", ROOT / "package.yaml", flags={"dev": False, "fast": True})}

        result = remove_default_flags({"app": {"dev": True, "fast": True}}, descriptors)

        assert result == {"app": {"dev": True}}

    def test_package_left_without_flags_is_dropped(self):
        descriptors = {"app": PackageDescriptor("app", ROOT / "package.yaml", flags={"dev": False})}

        assert remove_default_flags({"app": {"dev": False}}, descriptors) == {}

    def test_unknown_packages_keep_their_flags(self):
        assert remove_default_flags({"acme": {"x": True}}, {}) == {"acme": {"x": True}}


class TestAssembleConfig:
    """Building the draft from a resolved plan."""

    def test_draft_contents(self):
        app = _discovered(ROOT, "app", flags={"dev": False})
        lib = _discovered(ROOT / "lib", "lib")
        bad = _discovered(ROOT / "bad", "bad")
        dup = _discovered(ROOT / "nested" / "deeper" / "lib", "lib")
        plan = ResolvedPlan(
            snapshot=LTS,
            packages={"app": ROOT, "lib": ROOT / "lib"},
            flags={"app": {"dev": True}, "lib": {}},
            extra_deps={"acme": "0.3"},
            removed=["bad"],
            iterations=2,
        )

        draft = assemble_config(ROOT, plan, {"app": app, "lib": lib, "bad": bad}, [dup])

        assert draft.snapshot == LTS
        assert draft.packages == [".", "lib"]
        assert draft.extra_deps == ["acme-0.3"]
        assert draft.flags == {"app": {"dev": True}}
        assert draft.diagnostics.incompatible == ["bad"]
        assert draft.diagnostics.duplicates == ["nested/deeper/lib"]
        assert draft.user_message is not None

    def test_clean_plan_has_no_message(self):
        app = _discovered(ROOT, "app")
        plan = ResolvedPlan(snapshot=LTS, packages={"app": ROOT}, iterations=1)

        draft = assemble_config(ROOT, plan, {"app": app}, [])

        assert draft.user_message is None
        assert draft.diagnostics.is_empty()


class TestRenderConfig:
    """Rendering the commented YAML document."""

    def test_minimal_document(self):
        text = render_config(ProjectConfigDraft(snapshot=LTS, packages=["."]))
        data = yaml.safe_load(text)

        assert data == {"snapshot": "lts-22.28", "packages": ["."]}
        assert "# extra-deps: []" in text
        assert "# flags: {}" in text
        assert "user-message" not in data

    def test_full_document(self):
        groups = DiagnosticGroups(duplicates=["dup/lib"], incompatible=["bad"], extra_deps={"acme": "0.3"})
        draft = ProjectConfigDraft(
            snapshot=LTS,
            packages=[".", "lib"],
            extra_deps=["acme-0.3"],
            flags={"app": {"dev": True}},
            user_message=build_user_message(groups),
            diagnostics=groups,
        )

        text = render_config(draft)
        data = yaml.safe_load(text)

        assert data["snapshot"] == "lts-22.28"
        assert data["packages"] == [".", "lib"]
        assert data["extra-deps"] == ["acme-0.3"]
        assert data["flags"] == {"app": {"dev": True}}
        assert data["user-message"] == draft.user_message
        assert "#- bad\n" in text
        assert "#- dup/lib\n" in text
        assert text.index("#- bad") < text.index("extra-deps:")

    def test_empty_project_is_still_valid_yaml(self):
        data = yaml.safe_load(render_config(ProjectConfigDraft(snapshot=LTS)))

        assert data == {"snapshot": "lts-22.28", "packages": []}


class TestWriteConfig:
    """Writing the rendered file."""

    def test_writes_and_leaves_no_temporary_files(self, tmp_path):
        dest = tmp_path / "snapinit.yaml"

        write_config(dest, ProjectConfigDraft(snapshot=LTS, packages=["."]))

        assert yaml.safe_load(dest.read_text(encoding="utf-8"))["snapshot"] == "lts-22.28"
        assert [p.name for p in tmp_path.iterdir()] == ["snapinit.yaml"]

    def test_replaces_existing_file(self, tmp_path):
        dest = tmp_path / "snapinit.yaml"
        dest.write_text("old", encoding="utf-8")

        write_config(dest, ProjectConfigDraft(snapshot=LTS))

        assert "old" not in dest.read_text(encoding="utf-8")
