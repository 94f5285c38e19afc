"""Render the code location a captured failure originated from."""

from types import CodeType, FrameType, TracebackType

UNKNOWN_LOCATION = "unknown"


def _arity(code: CodeType) -> int:
    return code.co_argcount + code.co_kwonlyargcount


def _qualified_name(frame: FrameType) -> str:
    code = frame.f_code
    module = frame.f_globals.get("__name__") or "<unknown>"
    function = getattr(code, "co_qualname", code.co_name)
    return f"{module}.{function}/{_arity(code)}"


def location_from_traceback(tb: TracebackType | None) -> str:
    """Describe the innermost frame of a traceback.

    Returns ``"<file>:<line> <module>.<function>/<arity>"`` when the file is
    known, ``"<module>.<function>/<arity>"`` when it is not, and
    ``"unknown"`` when there is no usable frame. Never raises.
    """
    try:
        innermost: tuple[FrameType, int | None] | None = None
        while tb is not None:
            innermost = (tb.tb_frame, tb.tb_lineno)
            tb = tb.tb_next

        if innermost is None:
            return UNKNOWN_LOCATION

        frame, line = innermost
        name = _qualified_name(frame)
        filename = frame.f_code.co_filename

        if filename and not filename.startswith("<") and line is not None:
            return f"{filename}:{line} {name}"
        return name
    except Exception:
        return UNKNOWN_LOCATION


def location_from_exception(error: BaseException) -> str:
    """Describe where ``error`` was raised."""
    return location_from_traceback(error.__traceback__)
