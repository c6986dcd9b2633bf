"""
Repository context for the suggestion service.

Renders the file tree and the numbered contents of the repository's text
files into a single prompt block, so the model can refer to exact line
numbers of the current content.
"""

from typing import Iterator, List

from ai_editor.models.repository import NodeType, TreeNode
from ai_editor.services.content_store import ContentStore, NotFoundError
from ai_editor.utils.logging import get_logger

logger = get_logger(__name__)

BINARY_EXTENSIONS = {
    '.png', '.jpg', '.jpeg', '.gif', '.bmp', '.ico', '.svg',
    '.pdf', '.zip', '.tar', '.gz', '.rar', '.7z',
    '.exe', '.dll', '.so', '.dylib',
    '.class', '.jar', '.war',
    '.woff', '.woff2', '.ttf', '.eot',
}

EMPTY_REPOSITORY_CONTEXT = (
    "The repository is empty. New files can be created with \"write\" edits."
)


def is_binary_file(file_path: str) -> bool:
    """Check if file is binary based on extension."""
    return any(file_path.lower().endswith(ext) for ext in BINARY_EXTENSIONS)


def iter_files(nodes: List[TreeNode]) -> Iterator[TreeNode]:
    """Yield file nodes depth-first, in tree order."""
    for node in nodes:
        if node.type == NodeType.DIR:
            yield from iter_files(node.children)
        else:
            yield node


def render_tree(nodes: List[TreeNode], depth: int = 0) -> List[str]:
    lines = []
    for node in nodes:
        suffix = "/" if node.type == NodeType.DIR else ""
        lines.append(f"{'  ' * depth}- {node.name}{suffix}")
        lines.extend(render_tree(node.children, depth + 1))
    return lines


def number_lines(content: str) -> str:
    """Prefix each line with its 1-based number, as the model must address it."""
    if not content:
        return "(empty file)"
    return "\n".join(f"{number}: {line}" for number, line in enumerate(content.split("\n"), start=1))


class RepositoryContextBuilder:
    """Builds the repository context block sent with every chat request."""

    def __init__(self, store: ContentStore, max_files: int = 20, max_file_bytes: int = 20000):
        self.store = store
        self.max_files = max_files
        self.max_file_bytes = max_file_bytes

    async def build(self) -> str:
        """
        Render the tree and file contents.

        Raises:
            TransportError: If the store cannot be reached. The chat request
                must fail rather than answer without context.
        """
        tree = await self.store.get_tree()
        if not tree:
            return EMPTY_REPOSITORY_CONTEXT

        sections = ["Repository file tree:", *render_tree(tree), ""]

        # Every fetch counts against max_files, including oversized files
        fetched = 0
        for node in iter_files(tree):
            if fetched >= self.max_files:
                logger.info(f"Context limited to {self.max_files} files")
                break
            if is_binary_file(node.path):
                continue

            fetched += 1
            try:
                stored = await self.store.get_file(node.path)
            except NotFoundError:
                logger.warning(f"File disappeared while building context: {node.path}")
                continue

            if stored.size > self.max_file_bytes:
                sections.append(f"=== {node.path} === (omitted, {stored.size} bytes)")
                continue

            sections.append(f"=== {node.path} ===")
            sections.append(number_lines(stored.content))
            sections.append("")

        return "\n".join(sections).rstrip("\n")
