"""Jinja2 renderer for aggregate (batched) notification copy.

Resolves templates with a two-tier loader:
1. User-specified ``templates_path`` (overrides)
2. Built-in templates shipped with the package

Each notification type may ship ``<type>_title.txt`` and
``<type>_message.txt``; types without their own pair fall back to
``default_title.txt`` / ``default_message.txt``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, PackageLoader

if TYPE_CHECKING:
    from relaynote.core.types import NotificationType


class BatchRenderer:
    """Renders the title and message of a collapsed batch."""

    def __init__(self, templates_path: str | None = None) -> None:
        loaders: list[BaseLoader] = []
        if templates_path:
            loaders.append(FileSystemLoader(templates_path))
        loaders.append(PackageLoader("relaynote.notifications", "templates"))

        # Plain-text notification copy, nothing to escape.
        self._env = Environment(  # noqa: S701
            loader=ChoiceLoader(loaders),
            autoescape=False,
            keep_trailing_newline=False,
        )

    def render(
        self,
        notification_type: NotificationType,
        count: int,
        **context: Any,  # noqa: ANN401
    ) -> tuple[str, str]:
        """Render title and message for a batch of *count* notifications.

        Returns
        -------
        tuple[str, str]
            ``(title, message)``

        """
        type_name = notification_type.value
        title_tpl = self._env.select_template([f"{type_name}_title.txt", "default_title.txt"])
        message_tpl = self._env.select_template(
            [f"{type_name}_message.txt", "default_message.txt"],
        )

        variables = {"count": count, "type": type_name, **context}
        return (
            title_tpl.render(**variables).strip(),
            message_tpl.render(**variables).strip(),
        )
