"""The MIME part tree: nodes, tree building and searching."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator, Optional

_CT_MULTIPART_PREFIX = "multipart/"


@dataclass(eq=False)
class Part:
    """A node in the MIME multipart tree.

    The content type, disposition and file name are parsed out of the header
    for easier access.  Children form a chain starting at ``first_child`` and
    linked through ``next_sibling``.
    """

    content_type: str = ""
    part_id: str = ""
    parent: Optional[Part] = field(default=None, repr=False)
    first_child: Optional[Part] = field(default=None, repr=False)
    next_sibling: Optional[Part] = field(default=None, repr=False)
    header: dict[str, list[str]] = field(default_factory=dict)

    boundary: str = ""
    content_id: str = ""
    content_type_params: dict[str, str] = field(default_factory=dict)
    disposition: str = ""
    file_name: str = ""
    file_mod_date: Optional[datetime] = None
    charset: str = ""
    orig_charset: str = ""

    errors: list = field(default_factory=list)
    content: bytes = b""
    epilogue: bytes = b""

    def _children(self) -> Iterator[Part]:
        child = self.first_child
        while child is not None:
            yield child
            child = child.next_sibling

    def add_child(self, child: Part) -> None:
        """Append ``child`` (and any siblings it carries) to this part's children.

        The parent of the child and each of its siblings is set to this part.
        """
        if child is self:
            return
        if self.first_child is None:
            self.first_child = child
        else:
            current = self.first_child
            while current.next_sibling is not None:
                current = current.next_sibling
            if current is child:
                return
            current.next_sibling = child
        node = child
        while node is not None:
            if node is node.next_sibling:
                return
            node.parent = self
            node = node.next_sibling

    def text_content(self) -> bool:
        """Tell whether the content is text, judged by its content type."""
        if not self.content_type:
            # RFC 2045: no content type means text/plain; charset=us-ascii.
            return True
        return self.content_type.startswith("text/") or self.content_type.startswith(
            _CT_MULTIPART_PREFIX
        )

    def _shallow_copy(self, parent: Optional[Part]) -> Part:
        return Part(
            content_type=self.content_type,
            part_id=self.part_id,
            parent=parent,
            header=self.header,
            boundary=self.boundary,
            content_id=self.content_id,
            disposition=self.disposition,
            file_name=self.file_name,
            charset=self.charset,
            errors=self.errors,
            content=self.content,
            epilogue=self.epilogue,
        )

    def clone(self, parent: Optional[Part]) -> Part:
        """Copy this part, its children and its following siblings.

        The copy and its copied siblings get ``parent`` as their parent.
        """
        first: Optional[Part] = None
        previous: Optional[Part] = None
        node: Optional[Part] = self
        while node is not None:
            copy = node._shallow_copy(parent)
            if node.first_child is not None:
                copy.first_child = node.first_child.clone(copy)
            if previous is None:
                first = copy
            else:
                previous.next_sibling = copy
            previous = copy
            node = node.next_sibling
        assert first is not None
        return first

    def _walk_breadth(self) -> Iterator[Part]:
        queue = deque([self])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node._children())

    def _walk_depth(self) -> Iterator[Part]:
        root = self
        node = self
        while True:
            yield node
            if node.first_child is not None:
                node = node.first_child
                continue
            while node.next_sibling is None:
                if node is root:
                    return
                node = node.parent
            node = node.next_sibling

    def breadth_match_first(self, matcher: Callable[[Part], bool]) -> Optional[Part]:
        """Return the first part, breadth first, for which ``matcher`` is true."""
        return next(filter(matcher, self._walk_breadth()), None)

    def breadth_match_all(self, matcher: Callable[[Part], bool]) -> list[Part]:
        """Return all parts, breadth first, for which ``matcher`` is true."""
        return list(filter(matcher, self._walk_breadth()))

    def depth_match_first(self, matcher: Callable[[Part], bool]) -> Optional[Part]:
        """Return the first part, depth first, for which ``matcher`` is true."""
        return next(filter(matcher, self._walk_depth()), None)

    def depth_match_all(self, matcher: Callable[[Part], bool]) -> list[Part]:
        """Return all parts, depth first, for which ``matcher`` is true."""
        return list(filter(matcher, self._walk_depth()))