"""
Sink target resolution.

Computes where a message is written from static settings or from
directory/name expressions evaluated against the message.
"""

from pathlib import Path
from typing import Optional

from app.models.schemas import Message, SinkTarget
from app.utils.config import FileSinkSettings
from app.utils.helpers import normalise_suffix
from domains.file_sink.errors import ResolutionError
from domains.file_sink.expressions import ExpressionEvaluator, JinjaExpressionEvaluator


class SinkResolver:
    """Resolves a ``SinkTarget`` for each inbound message."""

    def __init__(
        self,
        settings: FileSinkSettings,
        evaluator: Optional[ExpressionEvaluator] = None,
    ):
        """
        Initialize resolver.

        Args:
            settings: File sink settings
            evaluator: Expression evaluator (default: sandboxed Jinja2)
        """
        self.settings = settings
        self.evaluator = evaluator or JinjaExpressionEvaluator(charset=settings.charset)
        self.suffix = normalise_suffix(settings.suffix)

    def resolve(self, message: Message) -> SinkTarget:
        """
        Resolve the target for ``message``.

        Raises:
            ResolutionError: If an expression fails or yields an empty value
        """
        return SinkTarget(
            directory=self.resolve_directory(message),
            filename=self.resolve_filename(message),
        )

    def resolve_directory(self, message: Message) -> Path:
        expression = self.settings.directory_expression
        if not expression:
            return Path(self.settings.directory).expanduser()

        directory = self.evaluator.evaluate(expression, message.payload, message.headers)
        if not directory.strip():
            raise ResolutionError(f"Directory expression {expression!r} produced an empty path")
        return Path(directory).expanduser()

    def resolve_filename(self, message: Message) -> str:
        expression = self.settings.name_expression
        if expression:
            name = self.evaluator.evaluate(expression, message.payload, message.headers)
        else:
            name = self.settings.name

        if not name.strip():
            raise ResolutionError(
                f"Empty filename for message {message.header('id')}"
                + (f" from expression {expression!r}" if expression else "")
            )

        if self.suffix and not name.endswith(self.suffix):
            name = f"{name}{self.suffix}"
        return name
