"""Display helpers shared by the text digest and the structured response."""

DEFAULT_LANGUAGE = "plaintext"

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "jsx": "javascript",
    "tsx": "typescript",
    "py": "python",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "json": "json",
    "md": "markdown",
    "java": "java",
    "c": "c",
    "cpp": "cpp",
    "h": "c",
    "cs": "csharp",
    "go": "go",
    "rb": "ruby",
    "php": "php",
    "sh": "bash",
    "yaml": "yaml",
    "yml": "yaml",
    "xml": "xml",
    "sql": "sql",
    "swift": "swift",
    "kt": "kotlin",
}


def language_for(path: str) -> str:
    extension = path.rsplit(".", 1)[-1].lower()
    return LANGUAGE_BY_EXTENSION.get(extension, DEFAULT_LANGUAGE)


def format_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"
