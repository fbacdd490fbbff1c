"""Tests for the call recorder testing utility."""

import pytest

from larder import Container
from larder.testing import recorded


class TestCallRecorder:
    """Tests for CallRecorder."""

    def test_wrapped_initializer_is_injected(self, recorder):
        """Test the wrapper keeps the signature used for injection."""
        container = Container(declarations={"url": "string", "client": "mixed"})
        container.set("url", "db://local")
        container.register("client", recorder.wrap(lambda url: f"client({url})", "client"))
        container.seal()

        assert container.get("client") == "client(db://local)"
        assert container.get("client") == "client(db://local)"
        assert recorder.count("client") == 1
        assert recorder.last("client").kwargs == {"url": "db://local"}
        assert recorder.last("client").result == "client(db://local)"

    def test_labels_in_call_order(self, recorder):
        first = recorder.wrap(lambda: 1, "first")
        second = recorder.wrap(lambda: 2, "second")

        first()
        second()
        first()

        assert recorder.labels() == ["first", "second", "first"]
        assert recorder.count() == 3
        assert recorder.count("first") == 2

    def test_default_label_is_function_name(self, recorder):
        def build():
            return "built"

        recorder.wrap(build)()

        assert recorder.labels() == ["build"]

    def test_last_unknown_label(self, recorder):
        with pytest.raises(ValueError, match="No recorded call for: missing"):
            recorder.last("missing")

    def test_decorator(self, recorder):
        @recorded(recorder, "hook")
        def hook(value):
            return value * 2

        assert hook(3) == 6
        assert recorder.last("hook").kwargs == {"value": 3}

    def test_clear(self, recorder):
        recorder.wrap(lambda: None, "x")()
        recorder.clear()

        assert recorder.count() == 0
