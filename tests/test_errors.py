"""Tests for the error taxonomy."""

import pytest

from larder import (
    AlreadySealedError,
    ConfigurationFileNotFoundError,
    ContainerError,
    CyclicDependencyError,
    ErrorKind,
    TypeMismatchError,
    UndefinedComponentError,
)


class TestErrors:
    """Tests for ContainerError subclasses."""

    @pytest.mark.parametrize(
        "error,kind",
        [
            (UndefinedComponentError("x"), ErrorKind.UNDEFINED_COMPONENT),
            (AlreadySealedError("x"), ErrorKind.ALREADY_SEALED),
            (TypeMismatchError("x", "c", "int"), ErrorKind.TYPE_MISMATCH),
            (CyclicDependencyError(["a", "a"]), ErrorKind.CYCLIC_DEPENDENCY),
        ],
    )
    def test_kind(self, error, kind):
        assert isinstance(error, ContainerError)
        assert error.kind is kind

    def test_cyclic_message(self):
        error = CyclicDependencyError(["a", "b", "a"])

        assert str(error) == "cyclic dependency: a -> b -> a"
        assert error.component == "a"
        assert error.chain == ["a", "b", "a"]

    def test_file_not_found_is_os_error(self):
        """Test callers catching FileNotFoundError also catch missing config files."""
        error = ConfigurationFileNotFoundError("missing", "/tmp/app.py")

        assert isinstance(error, FileNotFoundError)
        assert error.path == "/tmp/app.py"
        assert str(error) == "missing"

    def test_repr(self):
        assert repr(UndefinedComponentError("gone")) == (
            "UndefinedComponentError(kind=undefined_component, message='gone')"
        )
