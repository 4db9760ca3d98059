import unittest

from lattebind import Container


class TestVariadicConstructorInjection(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container(strict=False)

    def test_resolve_ignores_inherited_variadic_args_and_kwargs(self):
        class Base:
            def __init__(self, value: int = 7, *args, **kwargs):
                self.value = value
                self.args = args
                self.kwargs = kwargs

        class Derived(Base):
            ...
            # No explicit __init__; inherits Base.__init__ with *args/**kwargs

        child = self.cont.resolve(Derived)  # should ignore *args/**kwargs and use default for 'value'
        assert isinstance(child, Derived)
        assert child.value == 7
        assert child.args == ()
        assert child.kwargs == {}

    def test_resolve_does_not_forward_unmatched_named_args_through_variadic_kwargs(self):
        class Base:
            def __init__(self, value: int = 7, **kwargs):
                self.value = value
                self.kwargs = kwargs

        class Derived(Base):
            def __init__(self, name: str, **kwargs):
                super().__init__(**kwargs)
                self.name = name

        child = self.cont.resolve(Derived, a=5, name="abc")

        assert isinstance(child, Derived)
        assert child.kwargs == {}
        assert child.value == 7
        assert child.name == "abc"

    def test_positional_only_parameters_are_passed_positionally(self):
        class Point:
            def __init__(self, x, y, /, *, label="p"):
                self.coords = (x, y)
                self.label = label

        point = self.cont.resolve(Point, x=1, y=2, label="origin")

        assert point.coords == (1, 2)
        assert point.label == "origin"
