"""
Parser configuration.

Options are passed explicitly to ``parse``/``evaluate``. ``from_env`` is the
only place environment variables are consulted.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100
DEFAULT_EVAL_MAX_DEPTH = 400

ENV_PRETTY = "SQLEXPR_PRETTY"
ENV_MAX_DEPTH = "SQLEXPR_MAX_DEPTH"


def _log_dump(text: str) -> None:
    logging.getLogger("sqlexpr").info(text)


@dataclass
class ParserOptions:
    """
    Settings for a single parse (and the evaluation that follows it).

    Attributes:
        max_depth: Maximum nesting of parentheses, NOT and unary signs
        eval_max_depth: Maximum node depth walked by the evaluator
        pretty_print: Emit an indented AST dump after each successful parse
        dump: Sink for the dump; defaults to the ``sqlexpr`` logger at INFO
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    eval_max_depth: int = DEFAULT_EVAL_MAX_DEPTH
    pretty_print: bool = False
    dump: Callable[[str], None] = field(default=_log_dump, repr=False)

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.eval_max_depth < 1:
            raise ValueError(f"eval_max_depth must be positive, got {self.eval_max_depth}")

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> ParserOptions:
        """Build options from ``SQLEXPR_PRETTY`` and ``SQLEXPR_MAX_DEPTH``."""
        env = dict(os.environ) if env is None else env
        pretty = env.get(ENV_PRETTY, "").strip().lower() in ("true", "1")

        max_depth = DEFAULT_MAX_DEPTH
        raw_depth = env.get(ENV_MAX_DEPTH)
        if raw_depth:
            try:
                max_depth = int(raw_depth)
            except ValueError:
                logger.warning(f"Ignoring non-integer {ENV_MAX_DEPTH}={raw_depth!r}")
            else:
                if max_depth < 1:
                    logger.warning(f"Ignoring non-positive {ENV_MAX_DEPTH}={raw_depth!r}")
                    max_depth = DEFAULT_MAX_DEPTH

        return cls(max_depth=max_depth, pretty_print=pretty)
