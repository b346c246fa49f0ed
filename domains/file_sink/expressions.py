"""
Expression evaluation for sink directory and filename expressions.

Expressions see two names: ``payload`` and ``headers``. The default evaluator
compiles them as sandboxed Jinja2 expressions, e.g.::

    payload[:4]
    '/data/out/' ~ headers.dir

Header values are reachable as attributes or items (``headers['dir']``); use
item access for header names that collide with dict methods such as ``keys``.
Any object with an ``evaluate(expression, payload, headers)`` method can stand
in for the default evaluator.
"""

from typing import Any, Callable, Dict, Mapping, Protocol, Tuple

from jinja2 import StrictUndefined, TemplateError, Undefined, meta
from jinja2.sandbox import SandboxedEnvironment

from domains.file_sink.errors import ResolutionError


class ExpressionEvaluator(Protocol):
    """Evaluates an expression against a message payload and headers."""

    def evaluate(self, expression: str, payload: Any, headers: Mapping[str, Any]) -> str:
        ...


class JinjaExpressionEvaluator:
    """Sandboxed Jinja2 expression evaluator with a compiled-expression cache."""

    def __init__(self, charset: str = "utf-8"):
        """
        Initialize evaluator.

        Args:
            charset: Encoding used to expose bytes payloads as text
        """
        self.charset = charset
        self.environment = SandboxedEnvironment(undefined=StrictUndefined)
        self._compiled: Dict[str, Tuple[Callable[..., Any], bool]] = {}

    def _compile(self, expression: str) -> Tuple[Callable[..., Any], bool]:
        """Return the compiled expression and whether it reads ``payload``."""
        entry = self._compiled.get(expression)
        if entry is None:
            compiled = self.environment.compile_expression(expression, undefined_to_none=False)
            names = meta.find_undeclared_variables(
                self.environment.parse(f"{{{{ {expression} }}}}")
            )
            entry = (compiled, "payload" in names)
            self._compiled[expression] = entry
        return entry

    def evaluate(self, expression: str, payload: Any, headers: Mapping[str, Any]) -> str:
        """
        Evaluate ``expression`` and return its value as text.

        Bytes payloads are decoded with ``charset`` only for expressions that
        read ``payload``.

        Raises:
            ResolutionError: On syntax errors, undefined names or evaluation errors
        """
        try:
            compiled, reads_payload = self._compile(expression)
            if reads_payload and isinstance(payload, bytes):
                payload = payload.decode(self.charset)
            result = compiled(payload=payload, headers=dict(headers))
            if isinstance(result, Undefined):
                # StrictUndefined raises on str()
                str(result)
        except (TemplateError, ArithmeticError, AttributeError, LookupError, TypeError, ValueError) as e:
            raise ResolutionError(f"Expression {expression!r} failed: {e}") from e

        return "" if result is None else str(result)
