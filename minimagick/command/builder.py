"""Command line builder for ImageMagick verbs."""

import logging
from functools import partial
from typing import Any, Callable, List, Optional, Tuple

from minimagick.command.options import (
    FORMAT_OPTION,
    RECOGNIZED_OPTIONS,
    normalize_option_name,
)
from minimagick.exceptions import DispatchError

logger = logging.getLogger(__name__)


class CommandBuilder:
    """Accumulates the tokens of one verb invocation.

    Options can be added explicitly with ``add_option`` or by calling the
    option name as a method, which is resolved against the recognized option
    set. Unknown names raise ``DispatchError`` instead of being dropped.

    Attributes:
        verb: Tool subcommand being invoked (e.g. "mogrify")
        processor: Optional prefix placed before the verb (e.g. "gm")

    Examples:
        >>> c = CommandBuilder("mogrify")
        >>> c.resize("50%").auto_orient().push("photo.jpg").render()
        'mogrify -resize "50%" -auto-orient photo.jpg'
    """

    def __init__(self, verb: str, *args: Any, processor: str = "") -> None:
        """Initialize the builder.

        Args:
            verb: Tool subcommand to invoke
            *args: Initial tokens, pushed in order
            processor: Optional prefix placed before the verb
        """
        self._verb = verb
        self._processor = processor or ""
        self._args: List[str] = []
        for arg in args:
            self.push(arg)

    @property
    def verb(self) -> str:
        return self._verb

    @property
    def processor(self) -> str:
        return self._processor

    @property
    def args(self) -> Tuple[str, ...]:
        """Tokens added so far, in call order."""
        return tuple(self._args)

    def push(self, arg: Any) -> "CommandBuilder":
        """Append a single token verbatim (stripped of surrounding whitespace).

        No validation is done here; this is the escape hatch for file paths,
        ``+option`` forms and anything the option set does not cover.

        Args:
            arg: Token to append

        Returns:
            The builder, for chaining
        """
        self._args.append(str(arg).strip())
        return self

    __lshift__ = push

    def add_option(self, name: str, *values: Any) -> "CommandBuilder":
        """Append a recognized option and its values.

        Values are joined with single spaces and wrapped in one pair of
        double quotes. Values are not escaped.

        Args:
            name: Option name, with underscores or hyphens
            *values: Optional values for the option

        Returns:
            The builder, for chaining

        Raises:
            DispatchError: If the option is ``format`` or is not recognized
        """
        option = normalize_option_name(name)

        if option == FORMAT_OPTION:
            raise DispatchError(
                "You must call 'format' on the image object directly!"
            )
        if option not in RECOGNIZED_OPTIONS:
            raise DispatchError(
                f"'{type(self).__name__}' has no option '{name}'"
            )

        self.push(f"-{option}")
        if values:
            self.push('"' + " ".join(str(v) for v in values) + '"')
        return self

    def render(self, processor: Optional[str] = None) -> str:
        """Render the command string.

        Args:
            processor: Prefix to use when the builder has none of its own
                (typically the executor's configured processor)

        Returns:
            "<processor> <verb> <tokens...>" with surrounding whitespace
            removed, so an empty processor leaves no leading space
        """
        prefix = self._processor or processor or ""
        return f"{prefix} {self._verb} {' '.join(self._args)}".strip()

    def __getattr__(self, name: str) -> Callable[..., "CommandBuilder"]:
        # Only reached for names not defined on the class.
        if name.startswith("_"):
            raise AttributeError(name)

        option = normalize_option_name(name)
        if option == FORMAT_OPTION:
            raise DispatchError(
                "You must call 'format' on the image object directly!"
            )
        if option not in RECOGNIZED_OPTIONS:
            raise DispatchError(
                f"'{type(self).__name__}' object has no option '{name}'"
            )
        return partial(self.add_option, option)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"<CommandBuilder {self.render()!r}>"
