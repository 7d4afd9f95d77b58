"""
Content preprocessing applied uniformly before any scoring.

Preprocessing happens while files are loaded, so the content store and the
scorer only ever see normalized text.
"""

import logging
import shlex
import subprocess
from typing import Callable, List, Optional, Sequence

from .models import FileRecord

logger = logging.getLogger(__name__)


def trim_whitespace(text: str) -> str:
    """Remove every whitespace character, so layout changes score as identical."""
    return "".join(text.split())


class ExternalFormatter:
    """
    Pipes content through an external program (stdin -> stdout).

    Running every submission through the same formatter makes the score
    insensitive to formatting changes. When the program fails on a file the
    original text is kept and a warning is logged.
    """

    def __init__(self, command: str, timeout: float = 30.0):
        """
        Initialize formatter.

        Args:
            command: Program and arguments, split with shell rules
            timeout: Seconds allowed per file
        """
        self.command = command
        self.argv: List[str] = shlex.split(command)
        if not self.argv:
            raise ValueError("Formatter command is empty")
        self.timeout = timeout

    def __call__(self, text: str) -> str:
        try:
            completed = subprocess.run(
                self.argv,
                input=text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except FileNotFoundError:
            logger.warning(f"Formatter not found: {self.argv[0]}; using unformatted content")
            return text
        except subprocess.TimeoutExpired:
            logger.warning(f"Formatter timed out after {self.timeout}s; using unformatted content")
            return text
        except subprocess.CalledProcessError as e:
            logger.warning(
                f"Formatter exited with status {e.returncode}; using unformatted content"
            )
            return text
        return completed.stdout

    def __repr__(self) -> str:
        return f"ExternalFormatter({self.command!r})"


def chain(steps: Sequence[Callable[[str], str]]) -> Callable[[str], str]:
    """Compose preprocessing steps left to right."""

    def apply(text: str) -> str:
        for step in steps:
            text = step(text)
        return text

    return apply


def build_preprocessor(trim: bool = False, formatter: Optional[str] = None) -> Optional[Callable[[str], str]]:
    """
    Build the preprocessing function for a run.

    The formatter runs first, since it may rely on whitespace; trimming
    comes last.

    Returns:
        A callable, or None when no preprocessing is configured
    """
    steps: List[Callable[[str], str]] = []
    if formatter:
        steps.append(ExternalFormatter(formatter))
    if trim:
        steps.append(trim_whitespace)
    if not steps:
        return None
    return chain(steps)


def exclude_template_matches(records: Sequence[FileRecord], template_content: str) -> List[FileRecord]:
    """
    Drop files identical to the assignment template.

    Several students handing in the untouched template would otherwise all
    be flagged as copies of each other.

    Args:
        records: Loaded (and preprocessed) files
        template_content: Template text, preprocessed the same way

    Returns:
        The records whose content differs from the template
    """
    kept = []
    for record in records:
        if record.content == template_content:
            logger.info(f"{record.id} matches the template exactly and will not be checked")
            continue
        kept.append(record)
    return kept
