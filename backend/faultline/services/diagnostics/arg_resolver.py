from __future__ import annotations

"""backend/faultline/services/diagnostics/arg_resolver.py

Resolve a frame's positional argument values to parameter names.

The resolver looks up the callable a frame belongs to and reads its
signature, so ``validate(5)`` is reported as ``{"x": 5}`` instead of
``{0: 5}``. Whenever the callable cannot be found or introspected the
arguments keep their positional keys; resolution never raises.
Keyword-only and ``**kwargs`` values always carry their own names.

Resolution rules, in order:
- statement-like frames (module bodies, exec/eval, import machinery)
  keep at most their first operand, under key 0
- anonymous callables (lambdas) are never introspected
- class context: the named method, else the class's ``__getattr__``
- otherwise the free function of that name in the frame's namespace
"""

import builtins
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Union

from faultline.services.diagnostics.frames import FrameDescriptor

logger = logging.getLogger(__name__)

STATEMENTS = frozenset(
    {"<module>", "exec", "eval", "__import__", "import_module", "run_path", "run_module"}
)

ANONYMOUS_MARKER = "<lambda>"

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)

ResolvedArgs = Dict[Union[int, str], Any]


class ArgResolver(Protocol):
    """Minimal interface for argument resolution."""

    def resolve(self, frame: FrameDescriptor) -> Optional[ResolvedArgs]:
        ...


class PositionalArgResolver:
    """Resolver that never introspects: every argument keeps its position.

    Subclasses provide parameter names through ``parameter_names``.
    """

    def parameter_names(self, frame: FrameDescriptor) -> List[str]:
        return []

    def resolve(self, frame: FrameDescriptor) -> Optional[ResolvedArgs]:
        function = frame.function or ""

        if function in STATEMENTS:
            return {0: frame.args[0]} if frame.args else {}

        if frame.args is None:
            return None

        if ANONYMOUS_MARKER in function:
            names: List[str] = []
        else:
            names = self.parameter_names(frame)

        resolved: ResolvedArgs = {}
        for index, value in enumerate(frame.args):
            if index < len(names):
                resolved[names[index]] = value
            else:
                resolved[index] = value
        for name, value in frame.kwargs or ():
            resolved[name] = value
        return resolved


class IntrospectingArgResolver(PositionalArgResolver):
    """Resolver that reads parameter names with ``inspect.signature``."""

    def parameter_names(self, frame: FrameDescriptor) -> List[str]:
        try:
            target, bound = self._lookup(frame)
            if target is None:
                return []
            parameters = inspect.signature(target).parameters.values()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Cannot introspect %s: %s", frame.function, exc)
            return []

        names = [p.name for p in parameters if p.kind in _POSITIONAL]
        return names[bound:]

    def _lookup(self, frame: FrameDescriptor) -> Tuple[Optional[Callable[..., Any]], int]:
        """Return the callable to introspect and how many bound params it has."""
        name = frame.function or ""
        if frame.owner is not None:
            attr = _class_attribute(frame.owner, name)
            if attr is None:
                # No such method: calls are dispatched dynamically.
                attr = _class_attribute(frame.owner, "__getattr__")
            if attr is None:
                return None, 0
            return _unwrap(attr)

        if frame.namespace is not None and name in frame.namespace:
            target = frame.namespace[name]
        else:
            target = getattr(builtins, name, None)
        if not callable(target):
            return None, 0
        return target, 0


def _class_attribute(owner: type, name: str) -> Any:
    candidates = [name]
    if name.startswith("__") and not name.endswith("__"):
        # Private names are stored mangled with their defining class.
        candidates.extend(f"_{klass.__name__.lstrip('_')}{name}" for klass in owner.__mro__)
    for candidate in candidates:
        try:
            return inspect.getattr_static(owner, candidate)
        except AttributeError:
            continue
    return None


def _unwrap(attr: Any) -> Tuple[Optional[Callable[..., Any]], int]:
    if isinstance(attr, staticmethod):
        return attr.__func__, 0
    if isinstance(attr, classmethod):
        return attr.__func__, 1
    if isinstance(attr, property):
        return attr.fget, 1
    if inspect.isfunction(attr):
        return attr, 1
    if callable(attr):
        return attr, 0
    return None, 0
