"""Tests for rebuilding objects from their shown form."""

from __future__ import annotations

import threading
from typing import List

import pytest

from astkit.common.errors import AstError, MalformedInputError, UnknownTypeError
from astkit.io.dispatch import from_serialized_form
from astkit.io.registry import TypeRegistry
from astkit.objects import Frame, Object, UnitMap


class TestRoundTrip:
    """Reading the shown form of an object gives an equal object."""

    @pytest.mark.parametrize("show_comments", [True, False])
    def test_every_registered_class(self, all_objects: List[Object], show_comments: bool):
        for obj in all_objects:
            rebuilt = from_serialized_form(obj.show(show_comments))

            assert type(rebuilt) is type(obj)
            assert rebuilt == obj
            assert rebuilt.show() == obj.show()

    def test_default_instances(self):
        for obj in (Object(), Frame(1), UnitMap(4)):
            assert from_serialized_form(obj.show()) == obj

    def test_compact_text_matches_show(self, minimal_frame_text: str):
        frame = from_serialized_form(minimal_frame_text)

        assert frame.show(False) == minimal_frame_text

    def test_from_string_uses_dispatcher(self, sample_frame: Frame):
        rebuilt = Object.from_string(sample_frame.show())

        assert isinstance(rebuilt, Frame)
        assert rebuilt == sample_frame

    @pytest.mark.parametrize(
        "separator",
        ["\n", "\r", "\r\n", "\t", "\x0b", "\x0c", "\x1c", "\x1d", "\x1e", "\x85", "\u2028", "\u2029"],
    )
    def test_line_separators_in_strings(self, separator: str):
        frame = Frame(1)
        frame.title = f"a{separator}b"
        frame.set_label(1, f"{separator}x")

        rebuilt = from_serialized_form(frame.show())

        assert rebuilt.title == f"a{separator}b"
        assert rebuilt.get_label(1) == f"{separator}x"
        assert rebuilt == frame
        assert len(frame.show(False).split("\n")) == len(frame.show(False).splitlines()) + 1


class TestIdempotence:
    """Each call builds a new, independent object."""

    def test_equal_but_not_identical(self, sample_frame: Frame):
        text = sample_frame.show()

        first = from_serialized_form(text)
        second = from_serialized_form(text)

        assert first == second
        assert first is not second
        assert not first.same(second)

    def test_results_are_independent(self, sample_frame: Frame):
        text = sample_frame.show()
        first = from_serialized_form(text)
        second = from_serialized_form(text)

        first.title = "Changed"

        assert second.title == "Focal plane"
        assert first != second

    def test_concurrent_reads(self, sample_frame: Frame):
        text = sample_frame.show()
        results: List[Object] = []
        errors: List[Exception] = []

        def worker():
            try:
                for _ in range(20):
                    results.append(from_serialized_form(text))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(results) == 80
        assert all(r == sample_frame for r in results)


class TestScenarios:
    """Concrete scenarios for Frame and Object."""

    def test_two_axis_frame(self):
        text = Frame(2).show()

        assert "Begin Frame" in text
        assert "Naxes = 2" in text

        rebuilt = from_serialized_form(text)
        assert isinstance(rebuilt, Frame)
        assert rebuilt.get("Naxes") == 2
        assert rebuilt.n_axes == 2

    def test_base_object_read_twice(self):
        obj = Object()
        text = obj.show()

        first = from_serialized_form(text)
        second = from_serialized_form(text)

        assert first.class_name == second.class_name == obj.class_name == "Object"
        for name in ("ID", "Ident", "UseDefs"):
            assert first.get(name) == second.get(name) == obj.get(name)


class TestRejection:
    """Unknown and malformed input."""

    def test_unknown_class(self):
        with pytest.raises(UnknownTypeError) as exc_info:
            from_serialized_form(" Begin SkyFrame\n End SkyFrame\n")

        assert exc_info.value.class_name == "SkyFrame"
        assert isinstance(exc_info.value, AstError)

    def test_unknown_nested_class(self, minimal_frame_text: str):
        text = minimal_frame_text.replace("Axis", "SkyAxis")

        with pytest.raises(UnknownTypeError):
            from_serialized_form(text)

    def test_abstract_class_is_not_registered(self):
        with pytest.raises(UnknownTypeError):
            from_serialized_form(" Begin Mapping\n    Nin = 1\n End Mapping\n")

    @pytest.mark.parametrize("show_comments", [True, False])
    def test_every_truncation_is_malformed(self, show_comments: bool):
        text = Frame(1, "Title=Short").show(show_comments).rstrip()

        for cut in range(len(text)):
            with pytest.raises(MalformedInputError):
                from_serialized_form(text[:cut])

    def test_empty_input(self):
        with pytest.raises(MalformedInputError, match="No object found"):
            from_serialized_form("")

    def test_comments_only(self):
        with pytest.raises(MalformedInputError):
            from_serialized_form("# nothing here\n\n")

    def test_trailing_object(self):
        text = Object().show() + Object().show()

        with pytest.raises(MalformedInputError, match="Unexpected text after object"):
            from_serialized_form(text)

    def test_trailing_comments_allowed(self):
        obj = from_serialized_form(Object().show() + "\n# done\n")

        assert obj == Object()

    def test_non_string_input(self):
        with pytest.raises(TypeError):
            from_serialized_form(b" Begin Object\n End Object\n")


class TestCustomRegistry:
    """Callers may dispatch through their own registry."""

    def test_restricted_registry(self):
        registry = TypeRegistry()
        registry.register("Object", Object._from_fields)
        registry.freeze()

        assert from_serialized_form(Object("Ident=a").show(), registry) == Object("Ident=a")
        with pytest.raises(UnknownTypeError):
            from_serialized_form(UnitMap(1).show(), registry)
