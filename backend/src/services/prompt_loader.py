"""Jinja2-based prompt template loader for AI generation and edits.

Templates live in backend/prompts/ and are rendered with context variables. The
loader reloads templates on every call so prompt wording can be tuned without
restarting the server.

Inline fallbacks cover the two prompts the application needs when the prompts
directory is missing (e.g. an installed wheel without the data files).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import jinja2

logger = logging.getLogger(__name__)

# backend/src/services/prompt_loader.py -> backend/prompts/
DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parent.parent.parent / "prompts"

INLINE_PROMPTS: Dict[str, str] = {
    "edit.md": (
        "Respond formally and professionally. For questions always state the serial "
        "number of each question (eg. Q1 -, Q2 - or ). And for notes, do as told in the "
        "prompt but always keep the key points intact, only add/modify where required. "
        "No greetings or closing statements.\n"
        "Edit this text based on the prompt:\n\n"
        'Original Text: "{{ content }}"\n\n'
        'User Prompt: "{{ instruction }}"\n'
    ),
    "generate.md": (
        "Respond formally and professionally. If asked for a test, number every "
        "question with its serial number (eg. Q1 -, Q2 -). If asked for notes, organize "
        "them under clear headings with the key points as bullet lists. No greetings or "
        "closing statements.\n\n"
        "{{ prompt }}\n"
    ),
}


class PromptLoaderError(Exception):
    """Raised when a prompt cannot be loaded."""

    pass


class PromptLoader:
    """Load and render Jinja2 prompt templates.

    Example:
        >>> loader = PromptLoader()
        >>> loader.load("edit.md", {"content": "Q1 - ...", "instruction": "Add a Q2"})
    """

    def __init__(self, prompts_dir: Optional[Path] = None) -> None:
        self.prompts_dir = prompts_dir or DEFAULT_PROMPTS_DIR

        if self.prompts_dir.is_dir():
            self.env = jinja2.Environment(
                loader=jinja2.FileSystemLoader(str(self.prompts_dir)),
                autoescape=False,  # Prompts are markdown, not HTML
                auto_reload=True,
                keep_trailing_newline=True,
            )
            logger.debug(
                "PromptLoader initialized with filesystem templates",
                extra={"prompts_dir": str(self.prompts_dir)},
            )
        else:
            self.env = None
            logger.warning(
                "Prompts directory not found, using inline fallbacks",
                extra={"prompts_dir": str(self.prompts_dir)},
            )

    def load(self, path: str, context: Optional[Dict[str, Any]] = None) -> str:
        """Load and render a prompt template.

        Args:
            path: Template path relative to the prompts directory (e.g. "edit.md").
            context: Variables rendered into the template.

        Raises:
            PromptLoaderError: If the template cannot be found or rendered.
        """
        context = context or {}

        if self.env is not None:
            try:
                template = self.env.get_template(path)
                return template.render(**context)
            except jinja2.TemplateNotFound:
                logger.debug(
                    "Template not found in filesystem, trying inline fallback",
                    extra={"path": path},
                )
            except jinja2.TemplateError as e:
                logger.error(
                    "Failed to render template",
                    extra={"path": path, "error": str(e)},
                )
                raise PromptLoaderError(f"Failed to render template {path}: {e}") from e

        return self._get_inline_prompt(path, context)

    def _get_inline_prompt(self, path: str, context: Dict[str, Any]) -> str:
        template_str = INLINE_PROMPTS.get(path)
        if template_str is None:
            logger.warning(
                "No inline fallback for prompt path",
                extra={"path": path, "available": list(INLINE_PROMPTS)},
            )
            raise PromptLoaderError(
                f"Prompt not found: {path}. "
                f"Available inline prompts: {list(INLINE_PROMPTS)}"
            )

        try:
            return jinja2.Template(template_str, keep_trailing_newline=True).render(**context)
        except jinja2.TemplateError as e:
            raise PromptLoaderError(
                f"Failed to render inline template {path}: {e}"
            ) from e

    def list_available(self) -> Dict[str, list[str]]:
        """List prompt templates found on disk and built in."""
        result: Dict[str, list[str]] = {
            "filesystem": [],
            "inline": sorted(INLINE_PROMPTS),
        }
        if self.prompts_dir.is_dir():
            for md_file in self.prompts_dir.rglob("*.md"):
                result["filesystem"].append(md_file.relative_to(self.prompts_dir).as_posix())
        return result


__all__ = ["PromptLoader", "PromptLoaderError", "DEFAULT_PROMPTS_DIR", "INLINE_PROMPTS"]
