"""Tests for package descriptor loading."""

import pytest

from descriptor.loader import DescriptorLoader, descriptor_in_dir, parse_dependency
from errors import DescriptorError, DescriptorNameMismatch

from conftest import write_package

GENERATED = """\
cabal-version: 2.2
name:          widgets
version:       1.0.0

flag fast
  description: Build with optimisations
  default:     False
  manual:      True

flag pretty
  description: Colour output

library
  exposed-modules: Widgets
  build-depends:   base >= 4.7 && < 5,
                   text ^>= 2.0
                 , containers

executable widgets-cli
  main-is: Main.hs
  build-depends: base, widgets
"""


@pytest.fixture
def loader():
    return DescriptorLoader()


class TestParseDependency:
    """Splitting dependency strings."""

    def test_with_constraint(self):
        assert parse_dependency("base >= 4.7 && < 5") == ("base", ">= 4.7 && < 5")

    def test_without_constraint(self):
        assert parse_dependency("text") == ("text", "")

    def test_blank_is_rejected(self):
        assert parse_dependency("   ") is None


class TestYamlDescriptor:
    """The hand-written YAML form."""

    def test_reads_name_dependencies_and_flags(self, tmp_path, loader):
        write_package(
            tmp_path / "app",
            "app",
            dependencies=["base >= 4 && < 5", "aeson"],
            flags={"Dev": False},
        )

        desc = loader.load_dir(tmp_path / "app")

        assert desc.name == "app"
        assert desc.dependencies == {"base": ">= 4 && < 5", "aeson": ""}
        assert desc.flags == {"dev": False}

    def test_component_dependencies_are_merged(self, tmp_path, loader):
        (tmp_path / "package.yaml").write_text(
            "name: lib\n"
            "library:\n"
            "  dependencies: [containers]\n"
            "tests:\n"
            "  spec:\n"
            "    dependencies:\n"
            "    - hspec >= 2\n",
            encoding="utf-8",
        )

        desc = loader.load(tmp_path / "package.yaml")

        assert desc.dependencies == {"containers": "", "hspec": ">= 2"}

    def test_missing_name_is_an_error(self, tmp_path, loader):
        (tmp_path / "package.yaml").write_text("version: 1\n", encoding="utf-8")

        with pytest.raises(DescriptorError):
            loader.load(tmp_path / "package.yaml")

    def test_invalid_yaml_is_an_error(self, tmp_path, loader):
        (tmp_path / "package.yaml").write_text("name: [unclosed\n", encoding="utf-8")

        with pytest.raises(DescriptorError):
            loader.load(tmp_path / "package.yaml")


class TestGeneratedDescriptor:
    """The generated form."""

    def test_reads_fields(self, tmp_path, loader):
        (tmp_path / "widgets.cabal").write_text(GENERATED, encoding="utf-8")

        desc = loader.load(tmp_path / "widgets.cabal")

        assert desc.name == "widgets"
        assert desc.dependencies == {
            "base": ">= 4.7 && < 5",
            "text": "^>= 2.0",
            "containers": "",
            "widgets": "",
        }
        assert desc.flags == {"fast": False, "pretty": True}

    def test_sublibrary_dependency_does_not_end_the_list(self, tmp_path, loader):
        (tmp_path / "gizmo.cabal").write_text(
            "name: gizmo\n"
            "library\n"
            "  build-depends:\n"
            "    base >= 4,\n"
            "    widgets:internal >= 1.0,\n"
            "    containers\n"
            "    , text:{core, extra}\n"
            "  default-language: Haskell2010\n",
            encoding="utf-8",
        )

        desc = loader.load(tmp_path / "gizmo.cabal")

        assert desc.dependencies == {
            "base": ">= 4",
            "widgets": ">= 1.0",
            "containers": "",
            "text": "",
        }

    def test_file_name_must_match_package_name(self, tmp_path, loader):
        (tmp_path / "gadgets.cabal").write_text(GENERATED, encoding="utf-8")

        with pytest.raises(DescriptorNameMismatch) as exc_info:
            loader.load(tmp_path / "gadgets.cabal")

        assert exc_info.value.name == "widgets"
        assert exc_info.value.path == tmp_path / "gadgets.cabal"


class TestDescriptorInDir:
    """Choosing the descriptor of a directory."""

    def test_hand_written_form_wins(self, tmp_path):
        write_package(tmp_path, "widgets")
        (tmp_path / "widgets.cabal").write_text(GENERATED, encoding="utf-8")

        assert descriptor_in_dir(tmp_path) == tmp_path / "package.yaml"

    def test_single_generated_file(self, tmp_path):
        (tmp_path / "widgets.cabal").write_text(GENERATED, encoding="utf-8")

        assert descriptor_in_dir(tmp_path) == tmp_path / "widgets.cabal"

    def test_multiple_generated_files_are_ambiguous(self, tmp_path):
        (tmp_path / "a.cabal").write_text("name: a\n", encoding="utf-8")
        (tmp_path / "b.cabal").write_text("name: b\n", encoding="utf-8")

        with pytest.raises(DescriptorError):
            descriptor_in_dir(tmp_path)

    def test_empty_directory(self, tmp_path):
        with pytest.raises(DescriptorError):
            descriptor_in_dir(tmp_path)
