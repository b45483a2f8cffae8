from __future__ import annotations

"""backend/faultline/services/diagnostics/frames.py

Raw call-stack frames.

A FrameDescriptor is what the trace normalizer consumes: the called
function's name, the class it was called on (if any), the positional and
keyword argument values and the file/line the frame was executing.
Descriptors are built from live interpreter frames (tracebacks or the
current stack) or constructed directly by callers that already have that
information.
"""

import inspect
from dataclasses import dataclass, field
from types import FrameType, TracebackType
from typing import Any, List, Mapping, Optional, Tuple

INSTANCE_CALL = "->"
STATIC_CALL = "::"


@dataclass(frozen=True)
class FrameDescriptor:
    """One entry of a raw call stack.

    - function: the called function's name (frames without one are dropped)
    - class_name / owner / call_type: class context, when the call was made
      on an instance (``->``) or on the class itself (``::``)
    - args: positional argument values, None when they were not captured
    - kwargs: keyword-only and ``**kwargs`` values as (name, value) pairs
    - namespace: where free functions are looked up for introspection
    """

    function: Optional[str]
    args: Optional[Tuple[Any, ...]] = None
    file: Optional[str] = None
    line: Optional[int] = None
    class_name: Optional[str] = None
    call_type: Optional[str] = None
    kwargs: Optional[Tuple[Tuple[str, Any], ...]] = None
    owner: Optional[type] = field(default=None, repr=False, compare=False)
    namespace: Optional[Mapping[str, Any]] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_frame(cls, frame: FrameType, lineno: Optional[int] = None) -> "FrameDescriptor":
        """Describe a live frame, optionally at an explicit line number."""
        code = frame.f_code
        function = code.co_name
        file = code.co_filename or None
        line = lineno if lineno is not None else frame.f_lineno

        if function == "<module>":
            # Executing a module body: the module is the only operand.
            return cls(
                function=function,
                args=(frame.f_globals.get("__name__"),),
                file=file,
                line=line,
                namespace=frame.f_globals,
            )

        f_locals = frame.f_locals
        names = code.co_varnames[: code.co_argcount]
        args: List[Any] = [f_locals.get(name) for name in names]
        if code.co_flags & inspect.CO_VARARGS:
            varargs = f_locals.get(code.co_varnames[code.co_argcount + code.co_kwonlyargcount])
            if isinstance(varargs, tuple):
                args.extend(varargs)

        keywords = _keyword_values(code, f_locals)

        owner: Optional[type] = None
        call_type: Optional[str] = None
        if names and names[0] == "self" and "self" in f_locals:
            owner = type(f_locals["self"])
            call_type = INSTANCE_CALL
            args = args[1:]
        elif names and names[0] == "cls" and isinstance(f_locals.get("cls"), type):
            owner = f_locals["cls"]
            call_type = STATIC_CALL
            args = args[1:]
        else:
            owner = _static_method_owner(code, frame.f_globals)
            if owner is not None:
                call_type = STATIC_CALL

        return cls(
            function=function,
            args=tuple(args),
            file=file,
            line=line,
            class_name=owner.__name__ if owner is not None else None,
            call_type=call_type,
            kwargs=tuple(keywords) or None,
            owner=owner,
            namespace=frame.f_globals,
        )


def _keyword_values(code: Any, f_locals: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    start = code.co_argcount
    names = code.co_varnames[start : start + code.co_kwonlyargcount]
    values = [(name, f_locals[name]) for name in names if name in f_locals]
    if code.co_flags & inspect.CO_VARKEYWORDS:
        index = start + code.co_kwonlyargcount
        if code.co_flags & inspect.CO_VARARGS:
            index += 1
        extra = f_locals.get(code.co_varnames[index])
        if isinstance(extra, dict):
            values.extend(extra.items())
    return values


def _static_method_owner(code: Any, namespace: Mapping[str, Any]) -> Optional[type]:
    """Find the class of a ``@staticmethod`` from its qualified name."""
    qualname = getattr(code, "co_qualname", None)
    if qualname is None:
        # Code objects carry no qualified name before Python 3.11.
        return _static_method_owner_by_code(code, namespace)
    if "." not in qualname or "<locals>" in qualname:
        return None
    *path, name = qualname.split(".")
    target: Any = namespace.get(path[0])
    for part in path[1:]:
        target = getattr(target, part, None)
    if not isinstance(target, type):
        return None
    try:
        attr = inspect.getattr_static(target, name)
    except AttributeError:
        return None
    return target if isinstance(attr, staticmethod) else None


def _static_method_owner_by_code(code: Any, namespace: Mapping[str, Any]) -> Optional[type]:
    """Find the module-level class whose staticmethod runs ``code``."""
    for value in list(namespace.values()):
        if not isinstance(value, type):
            continue
        attr = value.__dict__.get(code.co_name)
        if isinstance(attr, staticmethod) and getattr(attr.__func__, "__code__", None) is code:
            return value
    return None


def frames_from_traceback(tb: Optional[TracebackType]) -> List[FrameDescriptor]:
    """Describe every frame of a traceback, newest frame first."""
    frames: List[FrameDescriptor] = []
    while tb is not None:
        frames.append(FrameDescriptor.from_frame(tb.tb_frame, tb.tb_lineno))
        tb = tb.tb_next
    frames.reverse()
    return frames


def frames_from_stack(
    frame: Optional[FrameType],
    *,
    skip_modules: frozenset[str] = frozenset(),
) -> List[FrameDescriptor]:
    """Describe ``frame`` and its callers, newest frame first.

    Frames whose module ``__name__`` is in ``skip_modules`` are left out.
    """
    frames: List[FrameDescriptor] = []
    while frame is not None:
        if frame.f_globals.get("__name__") not in skip_modules:
            frames.append(FrameDescriptor.from_frame(frame))
        frame = frame.f_back
    return frames
